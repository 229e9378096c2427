"""
Domain-specific exceptions for the points ledger.

Each one is also an instance of the matching kind in
``apps.common.exceptions`` so views can map it to a status code.
"""
from apps.common.exceptions import (
    InsufficientFundsError,
    InternalFailureError,
    InvalidArgumentError,
    NotFoundError,
    ServiceError,
)


class PointsServiceError(ServiceError):
    """Base exception for points services."""
    pass


class LedgerUserNotFoundError(PointsServiceError, NotFoundError):
    """Raised when a ledger operation targets a user that does not exist."""
    code = 'user_not_found'


class InvalidLedgerEntryError(PointsServiceError, InvalidArgumentError):
    """Raised for a zero delta or an unknown reason."""
    code = 'invalid_ledger_entry'


class InsufficientPointsError(PointsServiceError, InsufficientFundsError):
    """Raised when a spend exceeds the user's current balance."""
    pass


class LedgerWriteError(PointsServiceError, InternalFailureError):
    """Raised when the ledger storage fails; nothing was written."""
    pass
