from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.actors import actor_for
from apps.common.exceptions import service_error_response
from .models import Item
from .serializers import (
    ItemListSerializer,
    ItemSerializer,
    ItemWriteSerializer,
    ItemWithSwapStatusSerializer,
    LikeResponseSerializer,
)
from .services import (
    create_item,
    update_item,
    delete_item,
    get_listed_items,
    get_trending_items,
    get_item_for_display,
    toggle_like,
    get_user_items_with_swap_status,
    ItemsServiceError,
)


class ItemPagination(PageNumberPagination):
    """Custom pagination for item browse."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ItemViewSet(viewsets.ModelViewSet):
    """
    ViewSet for item listings.

    list: Browse available items (with filters)
    create: Submit a new listing (starts pending)
    retrieve: Item detail (counts a view)
    update / partial_update: Edit own listing
    destroy: Withdraw own pending or rejected listing
    """

    queryset = Item.objects.select_related('uploader')
    serializer_class = ItemSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]
    pagination_class = ItemPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """
        Filter available items based on query parameters.

        Filters:
        - search: Search in title and description
        - category, type, size, condition: Exact match
        - tag: Items carrying the tag
        """
        if self.action != 'list':
            return super().get_queryset()

        params = self.request.query_params
        return get_listed_items(
            search=params.get('search'),
            category=params.get('category'),
            type=params.get('type'),
            size=params.get('size'),
            condition=params.get('condition'),
            tag=params.get('tag'),
        )

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action in ('list', 'trending'):
            return ItemListSerializer
        if self.action in ('create', 'update', 'partial_update'):
            return ItemWriteSerializer
        return ItemSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter('search', str),
            OpenApiParameter('category', str),
            OpenApiParameter('type', str),
            OpenApiParameter('size', str),
            OpenApiParameter('condition', str),
            OpenApiParameter('tag', str),
        ],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(request=ItemWriteSerializer, responses={201: ItemSerializer})
    def create(self, request, *args, **kwargs):
        """Submit a new listing."""
        serializer = ItemWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            item = create_item(uploader=request.user, **serializer.validated_data)
        except ItemsServiceError as e:
            return service_error_response(e)

        return Response(
            ItemSerializer(item, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )

    def retrieve(self, request, *args, **kwargs):
        """Get item detail and count the view."""
        try:
            item = get_item_for_display(kwargs.get('pk'))
        except ItemsServiceError as e:
            return service_error_response(e)

        return Response(ItemSerializer(item, context={'request': request}).data)

    @extend_schema(request=ItemWriteSerializer, responses={200: ItemSerializer})
    def update(self, request, *args, **kwargs):
        """Edit a listing (owner or admin)."""
        partial = kwargs.pop('partial', False)
        item = self.get_object()

        serializer = ItemWriteSerializer(item, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            item = update_item(
                item_id=item.pk,
                actor=actor_for(request.user),
                data=serializer.validated_data,
            )
        except ItemsServiceError as e:
            return service_error_response(e)

        return Response(ItemSerializer(item, context={'request': request}).data)

    def destroy(self, request, *args, **kwargs):
        """Withdraw a listing."""
        try:
            delete_item(item_id=kwargs.get('pk'), actor=actor_for(request.user))
        except ItemsServiceError as e:
            return service_error_response(e)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: LikeResponseSerializer})
    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated])
    def like(self, request, pk=None):
        """Like or unlike an item."""
        try:
            likes, is_liked = toggle_like(item_id=pk, user=request.user)
        except ItemsServiceError as e:
            return service_error_response(e)

        return Response({'likes': likes, 'is_liked': is_liked})

    @action(detail=False, methods=['get'])
    def trending(self, request):
        """Most viewed available items."""
        items = get_trending_items()
        return Response(ItemListSerializer(items, many=True).data)

    @extend_schema(responses={200: ItemWithSwapStatusSerializer(many=True)})
    @action(detail=False, methods=['get'], permission_classes=[IsAuthenticated])
    def mine(self, request):
        """Current user's items with their latest swap status."""
        items = get_user_items_with_swap_status(request.user)
        return Response(ItemWithSwapStatusSerializer(items, many=True).data)
