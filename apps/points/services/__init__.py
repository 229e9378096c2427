"""
Points app services layer.

All balance changes go through the ledger; nothing else writes
``User.points``.
"""

from .exceptions import (
    PointsServiceError,
    LedgerUserNotFoundError,
    InvalidLedgerEntryError,
    InsufficientPointsError,
    LedgerWriteError,
)

from .ledger import (
    create_entry,
    spend_points_for_item,
    adjust_points,
    get_user_balance,
    get_user_stats,
    get_system_stats,
    get_user_history,
    reconcile_user_balance,
)


__all__ = [
    # Exceptions
    'PointsServiceError',
    'LedgerUserNotFoundError',
    'InvalidLedgerEntryError',
    'InsufficientPointsError',
    'LedgerWriteError',

    # Writes
    'create_entry',
    'spend_points_for_item',
    'adjust_points',
    'reconcile_user_balance',

    # Reads
    'get_user_balance',
    'get_user_stats',
    'get_system_stats',
    'get_user_history',
]
