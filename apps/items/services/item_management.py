"""Item listing CRUD, browse and engagement operations."""

import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import CharField, Count, F, OuterRef, Q, QuerySet, Subquery
from django.db.models.functions import Coalesce

from apps.swaps.models import Swap, SwapStatus

from ..models import AVAILABLE_STATUSES, Item, ItemStatus, ItemType
from .exceptions import (
    ItemNotFoundError,
    ItemPermissionError,
    ItemStateError,
    ItemValidationError,
)

User = get_user_model()

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'title', 'description', 'category', 'size', 'condition',
    'tags', 'images', 'type', 'point_cost',
)

# Items that have left the marketplace keep their listing as a record.
FROZEN_STATUSES = (ItemStatus.RESERVED, ItemStatus.SWAPPED, ItemStatus.REDEEMED)

# Owners may only withdraw listings that never reached the marketplace.
OWNER_DELETABLE_STATUSES = (ItemStatus.PENDING, ItemStatus.REJECTED)

MAX_TAG_LENGTH = 20


def _normalize_tags(tags: Optional[List[str]]) -> List[str]:
    normalized = []
    for tag in tags or []:
        tag = str(tag).strip().lower()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ItemValidationError(
                f"Tags cannot exceed {MAX_TAG_LENGTH} characters", field='tags'
            )
        if tag not in normalized:
            normalized.append(tag)
    return normalized


def _full_clean(item: Item) -> None:
    """Run model validation and surface the first problem as a service error."""
    try:
        item.full_clean(exclude=['uploader', 'approved_by', 'redeemed_by'])
    except ValidationError as e:
        field, messages = next(iter(e.message_dict.items()))
        raise ItemValidationError(messages[0], field=field)


def _get_item(item_id: UUID, *, lock: bool = False) -> Item:
    queryset = Item.objects.select_for_update() if lock else Item.objects
    try:
        return queryset.get(id=item_id)
    except Item.DoesNotExist:
        raise ItemNotFoundError(f"Item {item_id} not found", field='item_id')


def _check_can_modify(item: Item, actor) -> None:
    if not (actor.is_admin or item.uploader_id == actor.user_id):
        raise ItemPermissionError("Only the uploader or an admin can modify this item")


@transaction.atomic
def create_item(
    *,
    uploader: User,
    title: str,
    description: str,
    category: str,
    size: str,
    condition: str,
    type: str,
    point_cost: Optional[int] = None,
    tags: Optional[List[str]] = None,
    images: Optional[List[str]] = None,
) -> Item:
    """
    Submit a new listing.

    Every listing starts ``pending`` and only becomes visible once a
    moderator approves it.

    Raises:
        ItemValidationError: If fields are invalid or ``point_cost`` does not
            match ``type``
    """
    item = Item(
        uploader=uploader,
        title=title,
        description=description,
        category=category,
        size=size,
        condition=condition,
        type=type,
        point_cost=point_cost,
        tags=_normalize_tags(tags),
        images=list(images or []),
        status=ItemStatus.PENDING,
    )
    _full_clean(item)
    item.save()

    logger.info("Item %s submitted by %s", item.pk, uploader.pk)
    return item


@transaction.atomic
def update_item(*, item_id: UUID, actor, data: Dict[str, Any]) -> Item:
    """
    Edit listing details.

    Status and ownership are not editable here. Items that are reserved,
    swapped or redeemed are frozen.

    Raises:
        ItemNotFoundError, ItemPermissionError, ItemStateError,
        ItemValidationError
    """
    item = _get_item(item_id, lock=True)
    _check_can_modify(item, actor)

    if item.status in FROZEN_STATUSES:
        raise ItemStateError(
            f"Cannot edit an item that is {item.status}", field='status'
        )

    changes_price = any(
        field in data and data[field] != getattr(item, field)
        for field in ('type', 'point_cost')
    )
    if changes_price and has_open_swaps(item):
        raise ItemStateError(
            "Cannot change type or point cost while swaps are open", field='status'
        )

    for field in EDITABLE_FIELDS:
        if field in data:
            value = data[field]
            if field == 'tags':
                value = _normalize_tags(value)
            setattr(item, field, value)

    # Switching to a swap listing drops the point cost.
    if 'type' in data and 'point_cost' not in data and item.type == ItemType.SWAP:
        item.point_cost = None

    _full_clean(item)
    item.save()
    return item


@transaction.atomic
def delete_item(*, item_id: UUID, actor) -> None:
    """
    Withdraw a listing.

    Owners can withdraw listings that are still pending or were rejected;
    anything that reached the marketplace is removed by an admin through
    moderation.

    Raises:
        ItemNotFoundError, ItemPermissionError, ItemStateError
    """
    item = _get_item(item_id, lock=True)
    _check_can_modify(item, actor)

    if not actor.is_admin and item.status not in OWNER_DELETABLE_STATUSES:
        raise ItemStateError(
            f"Cannot withdraw an item that is {item.status}", field='status'
        )

    item.delete()
    logger.info("Item %s withdrawn by %s", item_id, actor)


def get_listed_items(
    *,
    search: Optional[str] = None,
    category: Optional[str] = None,
    type: Optional[str] = None,
    size: Optional[str] = None,
    condition: Optional[str] = None,
    tag: Optional[str] = None,
) -> QuerySet:
    """
    Browse items that are open to requests.

    Reserved, swapped and redeemed items never appear here.
    """
    queryset = (
        Item.objects
        .filter(status__in=AVAILABLE_STATUSES)
        .select_related('uploader')
        .annotate(num_likes=Count('likes', distinct=True))
    )

    if search:
        queryset = queryset.filter(
            Q(title__icontains=search) |
            Q(description__icontains=search)
        )

    if category:
        queryset = queryset.filter(category=category)

    if type:
        queryset = queryset.filter(type=type)

    if size:
        queryset = queryset.filter(size=size)

    if condition:
        queryset = queryset.filter(condition=condition)

    if tag:
        queryset = queryset.filter(tags__icontains=tag.lower())

    return queryset.order_by('-created_at')


def get_trending_items(*, limit: int = 9) -> QuerySet:
    """Most viewed, then most liked, available items."""
    return (
        Item.objects
        .filter(status__in=AVAILABLE_STATUSES)
        .select_related('uploader')
        .annotate(num_likes=Count('likes', distinct=True))
        .order_by('-views', '-num_likes', '-created_at')[:limit]
    )


def get_item_for_display(item_id: UUID) -> Item:
    """Fetch an item for its detail page and count the view."""
    try:
        item = Item.objects.select_related('uploader', 'approved_by').get(id=item_id)
    except Item.DoesNotExist:
        raise ItemNotFoundError(f"Item {item_id} not found", field='item_id')

    item.increment_views()
    return item


@transaction.atomic
def toggle_like(*, item_id: UUID, user: User) -> Tuple[int, bool]:
    """
    Like or unlike an item.

    Returns:
        ``(like_count, is_liked)`` after the toggle
    """
    item = _get_item(item_id, lock=True)

    if item.likes.filter(pk=user.pk).exists():
        item.likes.remove(user)
        is_liked = False
    else:
        item.likes.add(user)
        is_liked = True

    return item.likes.count(), is_liked


def get_user_items_with_swap_status(user: User) -> QuerySet:
    """
    A user's own items, newest first, each annotated with ``swap_status``:
    the status of the latest swap involving the item, or the item's own
    status when it was never part of a swap.
    """
    latest_swap = (
        Swap.objects
        .filter(Q(request_item=OuterRef('pk')) | Q(offered_item=OuterRef('pk')))
        .order_by('-created_at')
        .values('status')[:1]
    )
    return (
        Item.objects
        .filter(uploader=user)
        .annotate(
            swap_status=Coalesce(
                Subquery(latest_swap, output_field=CharField()),
                F('status'),
            ),
            num_likes=Count('likes', distinct=True),
        )
        .order_by('-created_at')
    )


def has_open_swaps(item: Item) -> bool:
    """True while a pending or accepted swap references the item."""
    return Swap.objects.filter(
        Q(request_item=item) | Q(offered_item=item),
        status__in=(SwapStatus.PENDING, SwapStatus.ACCEPTED),
    ).exists()
