"""
Swaps app services layer.

The swap state machine and direct redemption. Both spend points through
``apps.points.services.spend_points_for_item``.
"""

from .exceptions import (
    SwapsServiceError,
    SwapNotFoundError,
    SwapItemNotFoundError,
    InvalidSwapTransitionError,
    ItemUnavailableError,
    SwapPermissionError,
    InvalidSwapRequestError,
)

from .swap_workflow import (
    request_swap,
    accept_swap,
    reject_swap,
    complete_swap,
    get_swap,
    get_user_swaps,
    get_pending_swaps,
    list_swaps_for_admin,
)

from .redemption import (
    redeem_item,
)


__all__ = [
    # Exceptions
    'SwapsServiceError',
    'SwapNotFoundError',
    'SwapItemNotFoundError',
    'InvalidSwapTransitionError',
    'ItemUnavailableError',
    'SwapPermissionError',
    'InvalidSwapRequestError',

    # Workflow
    'request_swap',
    'accept_swap',
    'reject_swap',
    'complete_swap',
    'get_swap',
    'get_user_swaps',
    'get_pending_swaps',
    'list_swaps_for_admin',

    # Redemption
    'redeem_item',
]
