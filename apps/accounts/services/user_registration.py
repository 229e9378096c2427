"""User registration service."""

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from .exceptions import UserRegistrationError

User = get_user_model()


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = "",
    avatar_url: str = None,
) -> User:
    """
    Register a new member.

    New members start with zero points; points are only ever granted through
    the ledger (e.g. the upload bonus on approved listings).

    Raises:
        UserRegistrationError: If the email is already taken
    """
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("User with this email already exists", field='email')

    try:
        return User.objects.create_user(
            email=email,
            password=password,
            display_name=display_name,
            avatar_url=avatar_url or None,
        )
    except IntegrityError:
        raise UserRegistrationError("User with this email already exists", field='email')
