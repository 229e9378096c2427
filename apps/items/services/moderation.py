"""
Moderation of pending listings.

Approval makes a listing visible and pays the uploader the upload bonus.
The bonus is paid after the approval has been committed; if paying it fails
the approval stands and the failure is only logged.
"""

import logging
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.common.exceptions import ForbiddenError
from apps.points.models import LedgerReason
from apps.points.services import PointsServiceError, create_entry

from ..models import Item, ItemStatus
from .exceptions import ItemNotFoundError, ItemStateError, ItemValidationError

logger = logging.getLogger(__name__)

DECISIONS = (ItemStatus.APPROVED, ItemStatus.REJECTED)


def _require_admin(actor) -> None:
    if not actor.is_admin:
        raise ForbiddenError("Only admins can moderate items")


def _award_upload_bonus(item: Item) -> None:
    bonus = settings.POINTS_PER_UPLOAD
    if bonus <= 0:
        return

    try:
        create_entry(
            user_id=item.uploader_id,
            delta=bonus,
            reason=LedgerReason.UPLOAD,
            item=item,
            description=f"Upload bonus for '{item.title}'",
        )
    except PointsServiceError:
        logger.exception(
            "Upload bonus for item %s could not be paid to %s",
            item.pk, item.uploader_id,
        )


def approve_item(
    *,
    item_id: UUID,
    status: str,
    actor,
    reason: Optional[str] = None,
) -> Item:
    """
    Decide on a pending listing.

    Args:
        item_id: UUID of the pending item
        status: ``approved`` or ``rejected``
        actor: Acting admin; ``SYSTEM_ADMIN`` leaves ``approved_by`` empty
        reason: Optional note stored on the item

    Returns:
        The updated Item

    Raises:
        ForbiddenError: If the actor is not an admin
        ItemValidationError: If status is not a moderation decision
        ItemNotFoundError: If the item does not exist
        ItemStateError: If the item is not pending
    """
    _require_admin(actor)
    if status not in DECISIONS:
        raise ItemValidationError(
            "Status must be 'approved' or 'rejected'", field='status'
        )

    with transaction.atomic():
        try:
            item = Item.objects.select_for_update().get(id=item_id)
        except Item.DoesNotExist:
            raise ItemNotFoundError(f"Item {item_id} not found", field='item_id')

        if item.status != ItemStatus.PENDING:
            raise ItemStateError(
                f"Item is {item.status}, not pending", field='status'
            )

        item.status = status
        if reason:
            item.admin_notes = reason
        item.approved_by = actor.record
        item.approved_at = timezone.now()
        item.save(update_fields=[
            'status', 'admin_notes', 'approved_by', 'approved_at', 'updated_at',
        ])

    logger.info("Item %s %s by %s", item.pk, status, actor)

    if status == ItemStatus.APPROVED:
        _award_upload_bonus(item)

    return item


@transaction.atomic
def remove_item(*, item_id: UUID, actor) -> None:
    """Hard delete a listing (admin only)."""
    _require_admin(actor)

    try:
        item = Item.objects.select_for_update().get(id=item_id)
    except Item.DoesNotExist:
        raise ItemNotFoundError(f"Item {item_id} not found", field='item_id')

    item.delete()
    logger.info("Item %s removed by %s", item_id, actor)


def get_pending_items() -> QuerySet:
    """Moderation queue, oldest first."""
    return (
        Item.objects
        .filter(status=ItemStatus.PENDING)
        .select_related('uploader')
        .order_by('created_at')
    )


def list_items_for_admin(*, status: Optional[str] = None, search: Optional[str] = None) -> QuerySet:
    queryset = Item.objects.select_related('uploader').order_by('-created_at')
    if status:
        queryset = queryset.filter(status=status)
    if search:
        queryset = queryset.filter(
            Q(title__icontains=search) | Q(description__icontains=search)
        )
    return queryset
