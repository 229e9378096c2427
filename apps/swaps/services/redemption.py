"""Direct redemption: buy a points item outright, without a swap."""

import logging
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.items.models import AVAILABLE_STATUSES, Item, ItemStatus, ItemType
from apps.points.models import LedgerReason
from apps.points.services import spend_points_for_item

from .exceptions import (
    InvalidSwapRequestError,
    ItemUnavailableError,
    SwapItemNotFoundError,
    SwapPermissionError,
)

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def redeem_item(*, item_id: UUID, points_used: int, user: User) -> Item:
    """
    Spend points on a listed points item.

    Uses the same spending primitive as points swaps, so the balance is
    checked under lock and the debit is recorded exactly once.

    Raises:
        SwapItemNotFoundError: If the item does not exist
        ItemUnavailableError: If the item is not listed
        SwapPermissionError: If the user uploaded the item
        InvalidSwapRequestError: If the item is not a points item or
            ``points_used`` differs from its cost
        InsufficientPointsError: If the balance is below the cost
    """
    try:
        item = Item.objects.select_for_update().get(id=item_id)
    except Item.DoesNotExist:
        raise SwapItemNotFoundError(f"Item {item_id} not found", field='item_id')

    if item.status not in AVAILABLE_STATUSES:
        raise ItemUnavailableError(
            "Item is not available for redemption", field='item_id'
        )

    if item.type != ItemType.POINTS:
        raise InvalidSwapRequestError(
            "This item is not available for points redemption", field='item_id'
        )

    if item.uploader_id == user.pk:
        raise SwapPermissionError("Cannot redeem your own item", field='item_id')

    if points_used != item.point_cost:
        raise InvalidSwapRequestError(
            "Points used must match the item's point cost", field='points_used'
        )

    spend_points_for_item(
        user=user,
        item=item,
        cost=item.point_cost,
        reason=LedgerReason.REDEEM,
        description=f"Redeemed '{item.title}'",
    )

    item.status = ItemStatus.REDEEMED
    item.redeemed_by = user
    item.redeemed_at = timezone.now()
    item.save(update_fields=['status', 'redeemed_by', 'redeemed_at', 'updated_at'])

    logger.info("Item %s redeemed by %s for %d points", item.pk, user.pk, item.point_cost)
    return item
