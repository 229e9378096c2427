"""
Items app services layer.

Listing CRUD, browse and moderation. State-changing operations lock the
item row before checking its status.
"""

from .exceptions import (
    ItemsServiceError,
    ItemNotFoundError,
    ItemValidationError,
    ItemStateError,
    ItemPermissionError,
)

from .item_management import (
    create_item,
    update_item,
    delete_item,
    get_listed_items,
    get_trending_items,
    get_item_for_display,
    toggle_like,
    get_user_items_with_swap_status,
    has_open_swaps,
)

from .moderation import (
    approve_item,
    remove_item,
    get_pending_items,
    list_items_for_admin,
)


__all__ = [
    # Exceptions
    'ItemsServiceError',
    'ItemNotFoundError',
    'ItemValidationError',
    'ItemStateError',
    'ItemPermissionError',

    # Item management
    'create_item',
    'update_item',
    'delete_item',
    'get_listed_items',
    'get_trending_items',
    'get_item_for_display',
    'toggle_like',
    'get_user_items_with_swap_status',
    'has_open_swaps',

    # Moderation
    'approve_item',
    'remove_item',
    'get_pending_items',
    'list_items_for_admin',
]
