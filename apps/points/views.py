from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.common.exceptions import service_error_response
from apps.items.serializers import ItemSerializer
from apps.swaps.serializers import RedeemSerializer
from apps.swaps.services import redeem_item, SwapsServiceError
from .serializers import BalanceSerializer, LedgerEntrySerializer
from .services import (
    get_user_stats,
    get_user_history,
    PointsServiceError,
)


class HistoryPagination(PageNumberPagination):
    """Custom pagination for points history."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(
    responses={200: BalanceSerializer},
    description="Current points balance with lifetime totals.",
    tags=['points'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def balance(request):
    """Get current user's points balance."""
    request.user.refresh_from_db(fields=['points'])
    return Response({
        'balance': request.user.points,
        **get_user_stats(request.user.pk),
    })


@extend_schema(
    responses={200: LedgerEntrySerializer(many=True)},
    description="Points history, newest first.",
    tags=['points'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def history(request):
    """Get current user's ledger entries."""
    paginator = HistoryPagination()
    page = paginator.paginate_queryset(get_user_history(request.user.pk), request)
    serializer = LedgerEntrySerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)


@extend_schema(
    request=RedeemSerializer,
    responses={200: ItemSerializer},
    description="Redeem a listed points item directly.",
    tags=['points'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def redeem(request, item_id):
    """Spend points on an item."""
    serializer = RedeemSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        item = redeem_item(
            item_id=item_id,
            points_used=serializer.validated_data['points_used'],
            user=request.user,
        )
    except (SwapsServiceError, PointsServiceError) as e:
        return service_error_response(e)

    return Response({
        'message': 'Item redeemed successfully',
        'item': ItemSerializer(item, context={'request': request}).data,
        'balance': request.user.points,
    })
