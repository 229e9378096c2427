"""Domain-specific exceptions for items services."""
from apps.common.exceptions import (
    ForbiddenError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    ServiceError,
)


class ItemsServiceError(ServiceError):
    """Base exception for items services."""
    pass


class ItemNotFoundError(ItemsServiceError, NotFoundError):
    """Raised when an item does not exist."""
    code = 'item_not_found'


class ItemValidationError(ItemsServiceError, InvalidArgumentError):
    """Raised when item fields are inconsistent (e.g. point cost vs type)."""
    code = 'invalid_item'


class ItemStateError(ItemsServiceError, InvalidStateError):
    """Raised when an item is in the wrong status for the operation."""
    pass


class ItemPermissionError(ItemsServiceError, ForbiddenError):
    """Raised when the caller neither owns the item nor is an admin."""
    pass
