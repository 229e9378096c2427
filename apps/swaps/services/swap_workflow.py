"""
Swap workflow service.

A swap moves ``pending -> accepted -> completed`` or ``pending -> rejected``.
Every transition locks the swap row and then the item rows (in primary key
order) before checking status, so two concurrent calls on the same swap
cannot both pass the status check. A points swap then locks both users'
rows, again in primary key order, before any ledger write.

Points for a points swap move exactly once, when the swap is accepted: the
requester is debited and the request item's owner credited inside the same
transaction that reserves the items.
"""

import logging
from typing import List, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.items.models import AVAILABLE_STATUSES, Item, ItemStatus, ItemType
from apps.points.models import LedgerReason
from apps.points.services import (
    InsufficientPointsError,
    create_entry,
    spend_points_for_item,
)

from ..models import Swap, SwapStatus, SwapType
from .exceptions import (
    InvalidSwapRequestError,
    InvalidSwapTransitionError,
    ItemUnavailableError,
    SwapItemNotFoundError,
    SwapNotFoundError,
    SwapPermissionError,
)

User = get_user_model()

logger = logging.getLogger(__name__)


def _get_item(item_id: UUID, *, field: str) -> Item:
    try:
        return Item.objects.select_for_update().get(id=item_id)
    except Item.DoesNotExist:
        raise SwapItemNotFoundError(f"Item {item_id} not found", field=field)


def _lock_swap(swap_id: UUID) -> Swap:
    try:
        return Swap.objects.select_for_update().get(id=swap_id)
    except Swap.DoesNotExist:
        raise SwapNotFoundError(f"Swap {swap_id} not found", field='swap_id')


def _lock_items(swap: Swap) -> List[Item]:
    return list(
        Item.objects
        .select_for_update()
        .filter(id__in=swap.item_ids())
        .order_by('id')
    )


def _lock_users(*user_ids: UUID) -> List[User]:
    """Lock user rows in primary key order so opposite transfers cannot deadlock."""
    return list(
        User.objects
        .select_for_update()
        .filter(pk__in=set(user_ids))
        .order_by('pk')
    )


def _check_transition(swap: Swap, target: str) -> None:
    if not swap.can_transition_to(target):
        raise InvalidSwapTransitionError(
            f"Cannot move swap from {swap.status} to {target}",
            field='status',
        )


def _set_item_status(items: List[Item], status: str) -> None:
    for item in items:
        item.status = status
        item.save(update_fields=['status', 'updated_at'])


@transaction.atomic
def request_swap(
    *,
    requester: User,
    request_item_id: UUID,
    type: str,
    offered_item_id: Optional[UUID] = None,
    points_used: Optional[int] = None,
    notes: str = '',
) -> Swap:
    """
    Ask for another member's item, offering an item or points.

    Nothing is reserved and no points move until the owner accepts. The
    balance check here is advisory; it is repeated under lock on accept.

    Args:
        requester: User making the request
        request_item_id: UUID of the wanted item
        type: ``swap`` or ``points``
        offered_item_id: Requester's own item (swap type only)
        points_used: Must equal the item's point cost (points type only)
        notes: Message to the owner

    Returns:
        The pending Swap

    Raises:
        SwapItemNotFoundError: If either item does not exist
        ItemUnavailableError: If either item is not listed
        SwapPermissionError: If the requester owns the wanted item or does not
            own the offered one
        InvalidSwapRequestError: If the payload does not match ``type``
        InsufficientPointsError: If the requester cannot afford the item
    """
    if type not in SwapType.values:
        raise InvalidSwapRequestError(f"Unknown swap type '{type}'", field='type')

    request_item = _get_item(request_item_id, field='request_item_id')

    if request_item.status not in AVAILABLE_STATUSES:
        raise ItemUnavailableError(
            "Item is not available for swap", field='request_item_id'
        )

    if request_item.uploader_id == requester.pk:
        raise SwapPermissionError(
            "Cannot request your own item", field='request_item_id'
        )

    offered_item = None

    if type == SwapType.SWAP:
        if points_used is not None:
            raise InvalidSwapRequestError(
                "Points cannot be offered in an item swap", field='points_used'
            )
        if not offered_item_id:
            raise InvalidSwapRequestError(
                "Offered item is required for swap type", field='offered_item_id'
            )

        offered_item = _get_item(offered_item_id, field='offered_item_id')

        if offered_item.status not in AVAILABLE_STATUSES:
            raise ItemUnavailableError(
                "Offered item is not available for swap", field='offered_item_id'
            )
        if offered_item.uploader_id != requester.pk:
            raise SwapPermissionError(
                "You can only offer your own items", field='offered_item_id'
            )
    else:
        if offered_item_id:
            raise InvalidSwapRequestError(
                "An item cannot be offered in a points swap", field='offered_item_id'
            )
        if not isinstance(points_used, int) or isinstance(points_used, bool) or points_used <= 0:
            raise InvalidSwapRequestError(
                "Points used is required and must be positive for points type",
                field='points_used',
            )
        if request_item.type != ItemType.POINTS:
            raise InvalidSwapRequestError(
                "This item is not available for points redemption",
                field='request_item_id',
            )
        if points_used != request_item.point_cost:
            raise InvalidSwapRequestError(
                "Points used must match the item's point cost",
                field='points_used',
            )
        balance = User.objects.values_list('points', flat=True).get(pk=requester.pk)
        if balance < points_used:
            raise InsufficientPointsError(
                "Insufficient points for this item", field='points_used'
            )

    duplicate = Swap.objects.filter(
        requester=requester,
        request_item=request_item,
        status=SwapStatus.PENDING,
    ).exists()
    if duplicate:
        raise ItemUnavailableError(
            "You already have a pending request for this item",
            field='request_item_id',
        )

    swap = Swap(
        type=type,
        request_item=request_item,
        offered_item=offered_item,
        points_used=points_used if type == SwapType.POINTS else None,
        requester=requester,
        request_item_owner_id=request_item.uploader_id,
        offered_item_owner_id=offered_item.uploader_id if offered_item else None,
        notes=notes or '',
    )
    swap.full_clean(exclude=[
        'request_item', 'offered_item', 'requester',
        'request_item_owner', 'offered_item_owner',
    ])
    swap.save()

    logger.info(
        "Swap %s requested by %s for item %s (%s)",
        swap.pk, requester.pk, request_item.pk, type,
    )
    return swap


@transaction.atomic
def accept_swap(*, swap_id: UUID, user: User) -> Swap:
    """
    Accept a pending swap as one of the item owners.

    Reserves the involved items and, for a points swap, transfers
    ``points_used`` from the requester to the request item's owner. Either
    everything happens or nothing does; on insufficient points the swap
    stays pending.

    Raises:
        SwapNotFoundError: If the swap does not exist
        InvalidSwapTransitionError: If the swap is not pending
        SwapPermissionError: If the user owns neither item
        ItemUnavailableError: If an item was taken by another swap meanwhile
        InsufficientPointsError: If the requester can no longer afford it
    """
    swap = _lock_swap(swap_id)
    _check_transition(swap, SwapStatus.ACCEPTED)

    if not swap.is_owner(user):
        raise SwapPermissionError("Not authorized to accept this swap")

    items = _lock_items(swap)
    for item in items:
        if item.status not in AVAILABLE_STATUSES:
            raise ItemUnavailableError(
                f"Item {item.pk} is {item.status}", field='status'
            )

    _set_item_status(items, ItemStatus.RESERVED)

    if swap.type == SwapType.POINTS:
        request_item = next(i for i in items if i.pk == swap.request_item_id)
        _lock_users(swap.requester_id, swap.request_item_owner_id)
        spend_points_for_item(
            user=swap.requester,
            item=request_item,
            cost=swap.points_used,
            reason=LedgerReason.SWAP,
            swap=swap,
            description=f"Points swap for '{request_item.title}'",
        )
        create_entry(
            user_id=swap.request_item_owner_id,
            delta=swap.points_used,
            reason=LedgerReason.SWAP,
            item=request_item,
            swap=swap,
            description=f"Points received for '{request_item.title}'",
        )

    swap.status = SwapStatus.ACCEPTED
    swap.save(update_fields=['status', 'updated_at'])

    logger.info("Swap %s accepted by %s", swap.pk, user.pk)
    return swap


@transaction.atomic
def reject_swap(*, swap_id: UUID, user: User) -> Swap:
    """
    Decline a pending swap as one of the item owners.

    The involved items go back to ``listed``. No points move.

    Raises:
        SwapNotFoundError, InvalidSwapTransitionError, SwapPermissionError
    """
    swap = _lock_swap(swap_id)
    _check_transition(swap, SwapStatus.REJECTED)

    if not swap.is_owner(user):
        raise SwapPermissionError("Not authorized to reject this swap")

    # Items held by another accepted swap keep their status.
    items = [i for i in _lock_items(swap) if i.status in AVAILABLE_STATUSES]
    _set_item_status(items, ItemStatus.LISTED)

    swap.status = SwapStatus.REJECTED
    swap.save(update_fields=['status', 'updated_at'])

    logger.info("Swap %s rejected by %s", swap.pk, user.pk)
    return swap


@transaction.atomic
def complete_swap(*, swap_id: UUID, user: User) -> Swap:
    """
    Mark an accepted swap as done once the goods changed hands.

    Only statuses change here; points were already transferred on accept.

    Raises:
        SwapNotFoundError, InvalidSwapTransitionError, SwapPermissionError
    """
    swap = _lock_swap(swap_id)
    _check_transition(swap, SwapStatus.COMPLETED)

    if not swap.involves(user):
        raise SwapPermissionError("Not authorized to complete this swap")

    _set_item_status(_lock_items(swap), ItemStatus.SWAPPED)

    swap.status = SwapStatus.COMPLETED
    swap.completed_at = timezone.now()
    swap.save(update_fields=['status', 'completed_at', 'updated_at'])

    logger.info("Swap %s completed by %s", swap.pk, user.pk)
    return swap


def get_swap(swap_id: UUID) -> Swap:
    try:
        return (
            Swap.objects
            .select_related('request_item', 'offered_item', 'requester',
                            'request_item_owner', 'offered_item_owner')
            .get(id=swap_id)
        )
    except Swap.DoesNotExist:
        raise SwapNotFoundError(f"Swap {swap_id} not found", field='swap_id')


def get_user_swaps(*, user: User, status: Optional[str] = None) -> QuerySet:
    """Swaps the user takes part in, newest first."""
    queryset = (
        Swap.objects
        .filter(
            Q(requester=user) |
            Q(request_item_owner=user) |
            Q(offered_item_owner=user)
        )
        .select_related('request_item', 'offered_item', 'requester',
                        'request_item_owner', 'offered_item_owner')
    )
    if status:
        queryset = queryset.filter(status=status)
    return queryset.order_by('-created_at')


def get_pending_swaps() -> QuerySet:
    return (
        Swap.objects
        .filter(status=SwapStatus.PENDING)
        .select_related('request_item', 'offered_item', 'requester')
        .order_by('created_at')
    )


def list_swaps_for_admin(*, status: Optional[str] = None, type: Optional[str] = None) -> QuerySet:
    queryset = Swap.objects.select_related(
        'request_item', 'offered_item', 'requester',
    ).order_by('-created_at')
    if status:
        queryset = queryset.filter(status=status)
    if type:
        queryset = queryset.filter(type=type)
    return queryset
