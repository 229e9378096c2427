from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.accounts.actors import actor_for
from apps.accounts.permissions import IsAdminRole
from apps.accounts.serializers import (
    AdminUserSerializer,
    AdminUserUpdateSerializer,
    UserSerializer,
)
from apps.accounts.services import list_users, update_user
from apps.common.exceptions import ServiceError, service_error_response
from apps.items.serializers import (
    AdminItemSerializer,
    ItemApprovalSerializer,
    ItemSerializer,
    ItemWithSwapStatusSerializer,
)
from apps.items.services import (
    approve_item,
    remove_item,
    list_items_for_admin,
)
from apps.points.serializers import LedgerEntrySerializer, PointsAdjustmentSerializer
from apps.points.services import adjust_points
from apps.swaps.serializers import SwapSerializer
from apps.swaps.services import list_swaps_for_admin
from .queries import DashboardQueries
from .serializers import AdminDashboardSerializer, UserDashboardSerializer


class AdminPagination(PageNumberPagination):
    """Custom pagination for admin lists."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _paginated(request, queryset, serializer_class):
    paginator = AdminPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(serializer_class(page, many=True).data)


# =============================================================================
# Member dashboard
# =============================================================================

@extend_schema(
    responses={200: UserDashboardSerializer},
    description="Own items with swap status, own swaps and points summary.",
    tags=['dashboard'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_dashboard(request):
    """Get dashboard data for the current user - thin HTTP handler."""
    data = DashboardQueries.user_dashboard(request.user)
    request.user.refresh_from_db(fields=['points'])

    return Response({
        'user': UserSerializer(request.user).data,
        'items': ItemWithSwapStatusSerializer(data['items'], many=True).data,
        'swaps': SwapSerializer(data['swaps'], many=True).data,
        'points': data['points'],
    })


# =============================================================================
# Admin panel
# =============================================================================

@extend_schema(
    responses={200: AdminDashboardSerializer},
    description="Platform counts, recent activity and ledger totals.",
    tags=['admin'],
)
@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_dashboard(request):
    return Response(DashboardQueries.admin_overview())


@extend_schema(
    parameters=[
        OpenApiParameter('status', OpenApiTypes.STR, description='Item status'),
        OpenApiParameter('search', OpenApiTypes.STR, description='Title or description'),
    ],
    responses={200: AdminItemSerializer(many=True)},
    tags=['admin'],
)
@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_items(request):
    """All items, any status."""
    queryset = list_items_for_admin(
        status=request.query_params.get('status'),
        search=request.query_params.get('search'),
    )
    return _paginated(request, queryset, AdminItemSerializer)


@extend_schema(
    request=ItemApprovalSerializer,
    responses={200: ItemSerializer},
    description="Approve or reject a pending item. Approval pays the upload bonus.",
    tags=['admin'],
)
@api_view(['POST'])
@permission_classes([IsAdminRole])
def admin_approve_item(request, item_id):
    serializer = ItemApprovalSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        item = approve_item(
            item_id=item_id,
            status=serializer.validated_data['status'],
            reason=serializer.validated_data.get('reason') or None,
            actor=actor_for(request.user),
        )
    except ServiceError as e:
        return service_error_response(e)

    verb = 'approved' if item.status == 'approved' else 'rejected'
    return Response({
        'message': f'Item {verb} successfully',
        'item': ItemSerializer(item, context={'request': request}).data,
    })


@extend_schema(request=None, responses={204: None}, tags=['admin'])
@api_view(['DELETE'])
@permission_classes([IsAdminRole])
def admin_remove_item(request, item_id):
    try:
        remove_item(item_id=item_id, actor=actor_for(request.user))
    except ServiceError as e:
        return service_error_response(e)

    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    parameters=[
        OpenApiParameter('status', OpenApiTypes.STR),
        OpenApiParameter('type', OpenApiTypes.STR),
    ],
    responses={200: SwapSerializer(many=True)},
    tags=['admin'],
)
@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_swaps(request):
    queryset = list_swaps_for_admin(
        status=request.query_params.get('status'),
        type=request.query_params.get('type'),
    )
    return _paginated(request, queryset, SwapSerializer)


@extend_schema(
    parameters=[
        OpenApiParameter('role', OpenApiTypes.STR),
        OpenApiParameter('search', OpenApiTypes.STR),
    ],
    responses={200: AdminUserSerializer(many=True)},
    tags=['admin'],
)
@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_users(request):
    queryset = list_users(
        role=request.query_params.get('role'),
        search=request.query_params.get('search'),
    )
    return _paginated(request, queryset, AdminUserSerializer)


@extend_schema(
    request=AdminUserUpdateSerializer,
    responses={200: AdminUserSerializer},
    description="Change a user's role or active flag.",
    tags=['admin'],
)
@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def admin_update_user(request, user_id):
    serializer = AdminUserUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = update_user(
            user_id=user_id,
            actor=actor_for(request.user),
            **serializer.validated_data,
        )
    except ServiceError as e:
        return service_error_response(e)

    return Response(AdminUserSerializer(user).data)


@extend_schema(
    request=PointsAdjustmentSerializer,
    responses={201: LedgerEntrySerializer},
    description="Credit or debit a user's points. Recorded as an admin adjustment.",
    tags=['admin'],
)
@api_view(['POST'])
@permission_classes([IsAdminRole])
def admin_adjust_points(request, user_id):
    serializer = PointsAdjustmentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        entry = adjust_points(
            user_id=user_id,
            delta=serializer.validated_data['delta'],
            description=serializer.validated_data.get('description') or None,
            actor=actor_for(request.user),
        )
    except ServiceError as e:
        return service_error_response(e)

    return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)
