"""Domain-specific exceptions for accounts services."""
from apps.common.exceptions import (
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    ServiceError,
)


class AccountsServiceError(ServiceError):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError, InvalidArgumentError):
    """Raised when user registration fails."""
    code = 'registration_failed'


class InvalidCredentialsError(AccountsServiceError, InvalidArgumentError):
    """Raised when authentication credentials are invalid."""
    status_code = 401
    code = 'invalid_credentials'


class InactiveAccountError(AccountsServiceError, ForbiddenError):
    """Raised when account is deactivated."""
    code = 'inactive_account'


class UserNotFoundError(AccountsServiceError, NotFoundError):
    """Raised when user does not exist."""
    code = 'user_not_found'
