"""
Domain-specific exceptions for the swap workflow.

These exceptions represent business rule violations and are caught in views
and converted to HTTP responses through their common error kind.
"""
from apps.common.exceptions import (
    ForbiddenError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    ServiceError,
)


class SwapsServiceError(ServiceError):
    """Base exception for all swaps service errors."""
    pass


class SwapNotFoundError(SwapsServiceError, NotFoundError):
    """Raised when a swap does not exist."""
    code = 'swap_not_found'


class SwapItemNotFoundError(SwapsServiceError, NotFoundError):
    """Raised when the requested or offered item does not exist."""
    code = 'item_not_found'


class InvalidSwapTransitionError(SwapsServiceError, InvalidStateError):
    """Raised when a swap is not in the status the transition starts from."""
    code = 'invalid_transition'


class ItemUnavailableError(SwapsServiceError, InvalidStateError):
    """Raised when an item involved in a swap is no longer available."""
    code = 'item_unavailable'


class SwapPermissionError(SwapsServiceError, ForbiddenError):
    """Raised when the caller is not a party allowed to act on the swap."""
    pass


class InvalidSwapRequestError(SwapsServiceError, InvalidArgumentError):
    """Raised for inconsistent swap payloads (type, offered item, points)."""
    code = 'invalid_swap_request'
