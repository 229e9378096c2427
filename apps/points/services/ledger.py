"""
Points ledger service.

The ledger is the system of record for point movements. ``User.points`` is a
cached projection of the newest entry and is only ever written here, inside
the same transaction as the entry itself, with the user row locked.
"""

import logging
from typing import Optional, Tuple
from uuid import UUID

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import Count, Q, QuerySet, Sum
from django.db.models.functions import Abs, Coalesce

from apps.common.exceptions import ForbiddenError
from apps.points.models import LedgerReason, PointsLedgerEntry

from .exceptions import (
    InsufficientPointsError,
    InvalidLedgerEntryError,
    LedgerUserNotFoundError,
    LedgerWriteError,
)

User = get_user_model()

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = PointsLedgerEntry._meta.get_field('description').max_length


def _lock_user(user_id: UUID) -> User:
    try:
        return User.objects.select_for_update().get(pk=user_id)
    except User.DoesNotExist:
        raise LedgerUserNotFoundError(f"User {user_id} not found", field='user_id')


def _append(*, user: User, delta: int, reason: str, item=None, swap=None,
            description=None, admin=None) -> PointsLedgerEntry:
    """Write one entry for an already locked user and move the cached balance."""
    previous_balance = user.points
    new_balance = PointsLedgerEntry.clamp(previous_balance, delta)
    sequence = PointsLedgerEntry.objects.filter(user=user).count() + 1

    entry = PointsLedgerEntry.objects.create(
        user=user,
        sequence=sequence,
        delta=delta,
        reason=reason,
        previous_balance=previous_balance,
        new_balance=new_balance,
        item=item,
        swap=swap,
        description=description,
        admin=admin,
    )

    user.points = new_balance
    user.save(update_fields=['points'])

    logger.info(
        "Ledger %s: user=%s delta=%+d balance %d -> %d",
        reason, user.pk, delta, previous_balance, new_balance,
    )
    return entry


def _validate(delta: int, reason: str, description: Optional[str] = None) -> None:
    if not isinstance(delta, int) or isinstance(delta, bool) or delta == 0:
        raise InvalidLedgerEntryError("Delta must be a nonzero integer", field='delta')
    if reason not in LedgerReason.values:
        raise InvalidLedgerEntryError(f"Unknown ledger reason '{reason}'", field='reason')
    if description and len(description) > DESCRIPTION_MAX_LENGTH:
        raise InvalidLedgerEntryError(
            f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters",
            field='description',
        )


def _invalid_entry(error: ValidationError) -> InvalidLedgerEntryError:
    field = next(iter(error.message_dict), None) if hasattr(error, 'error_dict') else None
    return InvalidLedgerEntryError("; ".join(error.messages), field=field)


def create_entry(
    *,
    user_id: UUID,
    delta: int,
    reason: str,
    item=None,
    swap=None,
    description: Optional[str] = None,
    admin: Optional[User] = None,
) -> PointsLedgerEntry:
    """
    Record a point movement and update the user's cached balance.

    The new balance is floored at zero: an overspend that reaches this point
    is absorbed, and the entry stores the clamped balance rather than
    ``previous_balance + delta``. Callers that must refuse an overspend use
    :func:`spend_points_for_item` instead.

    Args:
        user_id: UUID of the user whose balance moves
        delta: Signed, nonzero amount
        reason: One of ``LedgerReason``
        item, swap: Optional cross references
        description: Free text, at most 200 characters
        admin: Admin user responsible for the movement, if any

    Returns:
        The created PointsLedgerEntry

    Raises:
        InvalidLedgerEntryError: If delta is zero, reason unknown or the
            entry fails model validation
        LedgerUserNotFoundError: If the user does not exist (nothing written)
        LedgerWriteError: If storage fails (nothing written)
    """
    _validate(delta, reason, description)

    try:
        with transaction.atomic():
            user = _lock_user(user_id)
            return _append(
                user=user,
                delta=delta,
                reason=reason,
                item=item,
                swap=swap,
                description=description,
                admin=admin,
            )
    except ValidationError as e:
        raise _invalid_entry(e) from e
    except DatabaseError as e:
        logger.error("Ledger write failed for user %s: %s", user_id, e)
        raise LedgerWriteError("Could not record point movement") from e


@transaction.atomic
def spend_points_for_item(
    *,
    user: User,
    item,
    cost: int,
    reason: str,
    swap=None,
    description: Optional[str] = None,
) -> PointsLedgerEntry:
    """
    Debit ``cost`` points from ``user`` to acquire ``item``.

    Shared by swap acceptance and direct redemption. The balance is checked
    against the locked user row, so a concurrent spend cannot push the
    balance through zero; instead of being clamped the spend is refused.

    Raises:
        InvalidLedgerEntryError: If cost is not a positive integer or the
            entry fails model validation
        InsufficientPointsError: If the balance is below ``cost``
    """
    if not isinstance(cost, int) or isinstance(cost, bool) or cost <= 0:
        raise InvalidLedgerEntryError("Cost must be a positive integer", field='cost')

    try:
        locked = _lock_user(user.pk)
        if locked.points < cost:
            raise InsufficientPointsError(
                f"Insufficient points: balance {locked.points}, cost {cost}",
                field='points',
            )
        _validate(-cost, reason, description)
        entry = _append(
            user=locked,
            delta=-cost,
            reason=reason,
            item=item,
            swap=swap,
            description=description,
        )
    except ValidationError as e:
        raise _invalid_entry(e) from e
    except DatabaseError as e:
        logger.error("Point spend failed for user %s: %s", user.pk, e)
        raise LedgerWriteError("Could not record point movement") from e

    user.points = locked.points
    return entry


def adjust_points(*, user_id: UUID, delta: int, actor, description: str = None) -> PointsLedgerEntry:
    """
    Manual balance correction by an admin.

    The real admin is recorded on the entry; the system admin leaves it empty.
    """
    if not actor.is_admin:
        raise ForbiddenError("Only admins can adjust points")

    if not description:
        description = f"Adjusted by {actor}"[:DESCRIPTION_MAX_LENGTH]

    return create_entry(
        user_id=user_id,
        delta=delta,
        reason=LedgerReason.ADMIN_ADJUSTMENT,
        description=description,
        admin=actor.record,
    )


def get_user_balance(user_id: UUID) -> int:
    """Balance according to the ledger: the newest entry's ``new_balance``, or 0."""
    latest = (
        PointsLedgerEntry.objects
        .filter(user_id=user_id)
        .order_by('-sequence')
        .values_list('new_balance', flat=True)
        .first()
    )
    return latest or 0


def _movement_totals(queryset: QuerySet) -> dict:
    return queryset.aggregate(
        earned=Coalesce(Sum('delta', filter=Q(delta__gt=0)), 0),
        spent=Coalesce(Sum(Abs('delta'), filter=Q(delta__lt=0)), 0),
        transactions=Count('id'),
        users=Count('user', distinct=True),
    )


def get_user_stats(user_id: UUID) -> dict:
    totals = _movement_totals(PointsLedgerEntry.objects.filter(user_id=user_id))
    return {
        'total_earned': totals['earned'],
        'total_spent': totals['spent'],
        'total_transactions': totals['transactions'],
    }


def get_system_stats() -> dict:
    totals = _movement_totals(PointsLedgerEntry.objects.all())
    return {
        'total_points_earned': totals['earned'],
        'total_points_spent': totals['spent'],
        'total_transactions': totals['transactions'],
        'unique_users': totals['users'],
    }


def get_user_history(user_id: UUID) -> QuerySet:
    """A user's entries newest first, with related records joined."""
    return (
        PointsLedgerEntry.objects
        .filter(user_id=user_id)
        .select_related('item', 'swap', 'admin')
        .order_by('-sequence')
    )


@transaction.atomic
def reconcile_user_balance(user_id: UUID, *, fix: bool = True) -> Tuple[int, int]:
    """
    Compare the cached balance with the ledger and, if ``fix``, rewrite the
    cache from the ledger.

    Returns:
        ``(cached_balance, ledger_balance)`` as they were before any fix
    """
    user = _lock_user(user_id)
    cached = user.points
    ledger_balance = get_user_balance(user_id)

    if cached != ledger_balance:
        logger.warning(
            "Balance drift for user %s: cached=%d ledger=%d",
            user_id, cached, ledger_balance,
        )
        if fix:
            user.points = ledger_balance
            user.save(update_fields=['points'])
    return cached, ledger_balance
