from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.common.exceptions import service_error_response
from apps.points.services import PointsServiceError
from .serializers import SwapSerializer, SwapRequestSerializer
from .services import (
    request_swap,
    accept_swap,
    reject_swap,
    complete_swap,
    get_swap,
    get_user_swaps,
    SwapsServiceError,
    SwapPermissionError,
)


class SwapPagination(PageNumberPagination):
    """Custom pagination for swaps."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class SwapViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    ViewSet for the swap workflow.

    All state changes are handled by services; views are thin HTTP handlers.

    list: Swaps the current user takes part in
    create: Request a swap (item for item, or item for points)
    retrieve: Swap detail (parties only)
    accept / reject: Item owners decide on a pending swap
    complete: Any party marks an accepted swap as done
    """

    serializer_class = SwapSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = SwapPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        return get_user_swaps(
            user=self.request.user,
            status=self.request.query_params.get('status'),
        )

    @extend_schema(parameters=[OpenApiParameter('status', str)])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(request=SwapRequestSerializer, responses={201: SwapSerializer})
    def create(self, request):
        """Request a swap."""
        serializer = SwapRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            swap = request_swap(requester=request.user, **serializer.validated_data)
        except (SwapsServiceError, PointsServiceError) as e:
            return service_error_response(e)

        return Response(
            SwapSerializer(get_swap(swap.pk)).data,
            status=status.HTTP_201_CREATED
        )

    def retrieve(self, request, pk=None):
        """Swap detail, visible to its parties and admins."""
        try:
            swap = get_swap(pk)
            if not (swap.involves(request.user) or request.user.is_admin):
                raise SwapPermissionError("Not a party to this swap")
        except SwapsServiceError as e:
            return service_error_response(e)

        return Response(SwapSerializer(swap).data)

    def _transition(self, request, pk, transition):
        try:
            swap = transition(swap_id=pk, user=request.user)
        except (SwapsServiceError, PointsServiceError) as e:
            return service_error_response(e)

        return Response(SwapSerializer(get_swap(swap.pk)).data)

    @extend_schema(request=None, responses={200: SwapSerializer})
    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        """Accept a pending swap (item owners only)."""
        return self._transition(request, pk, accept_swap)

    @extend_schema(request=None, responses={200: SwapSerializer})
    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        """Reject a pending swap (item owners only)."""
        return self._transition(request, pk, reject_swap)

    @extend_schema(request=None, responses={200: SwapSerializer})
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """Complete an accepted swap (any party)."""
        return self._transition(request, pk, complete_swap)
