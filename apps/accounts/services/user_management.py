"""Admin-side user management."""

from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q, QuerySet

from apps.common.exceptions import ForbiddenError

from .exceptions import UserNotFoundError

User = get_user_model()


def get_user(user_id: UUID) -> User:
    try:
        return User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User {user_id} not found", field='user_id')


def list_users(*, role: str = None, search: str = None) -> QuerySet:
    """Users newest first, optionally filtered by role and name/email."""
    queryset = User.objects.all().order_by('-created_at')
    if role:
        queryset = queryset.filter(role=role)
    if search:
        queryset = queryset.filter(
            Q(display_name__icontains=search) | Q(email__icontains=search)
        )
    return queryset


@transaction.atomic
def update_user(*, user_id: UUID, actor, role: str = None, is_active: bool = None) -> User:
    """
    Change a user's role or active flag (admin only).

    Points are deliberately not editable here; use the ledger's
    ``adjust_points`` so the change is recorded.
    """
    if not actor.is_admin:
        raise ForbiddenError("Only admins can update users")

    try:
        user = User.objects.select_for_update().get(pk=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User {user_id} not found", field='user_id')

    update_fields = []
    if role is not None:
        user.role = role
        update_fields.append('role')
    if is_active is not None:
        user.is_active = is_active
        update_fields.append('is_active')
    if update_fields:
        user.save(update_fields=update_fields)
    return user
