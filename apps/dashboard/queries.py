"""
Dashboard Queries
=================

Read-only aggregations behind the member dashboard and the admin panel.

Classes:
    DashboardQueries: Static methods returning plain dictionaries.

Example:
    Admin overview::

        from apps.dashboard.queries import DashboardQueries

        stats = DashboardQueries.admin_overview()
        print(stats['counts']['pending_items'])
"""

from apps.accounts.models import User
from apps.items.models import Item, ItemStatus
from apps.items.services import get_user_items_with_swap_status
from apps.points.services import get_system_stats, get_user_balance, get_user_stats
from apps.swaps.models import Swap, SwapStatus
from apps.swaps.services import get_user_swaps


class DashboardQueries:
    """
    Aggregations for dashboard endpoints.

    Methods:
        user_dashboard: A member's items, swaps and points summary.
        admin_overview: Platform counts, recent activity and ledger totals.
    """

    RECENT_LIMIT = 5

    @staticmethod
    def user_dashboard(user):
        """
        Everything the member dashboard shows in one call.

        The balance is read from the ledger rather than the cached field on
        the user row.

        Returns:
            dict with ``items`` and ``swaps`` querysets and a ``points`` dict
            of ``balance``, ``total_earned``, ``total_spent`` and
            ``total_transactions``
        """
        return {
            'items': get_user_items_with_swap_status(user),
            'swaps': get_user_swaps(user=user),
            'points': {
                'balance': get_user_balance(user.pk),
                **get_user_stats(user.pk),
            },
        }

    @staticmethod
    def admin_overview():
        limit = DashboardQueries.RECENT_LIMIT
        recent_items = Item.objects.select_related('uploader').order_by('-created_at')[:limit]
        recent_swaps = (
            Swap.objects
            .select_related('requester', 'request_item')
            .order_by('-created_at')[:limit]
        )

        return {
            'counts': {
                'total_users': User.objects.count(),
                'total_items': Item.objects.count(),
                'pending_items': Item.objects.filter(status=ItemStatus.PENDING).count(),
                'total_swaps': Swap.objects.count(),
                'pending_swaps': Swap.objects.filter(status=SwapStatus.PENDING).count(),
            },
            'recent_activity': {
                'items': [
                    {
                        'id': item.pk,
                        'title': item.title,
                        'uploader': item.uploader.get_display_name(),
                        'status': item.status,
                        'created_at': item.created_at,
                    }
                    for item in recent_items
                ],
                'swaps': [
                    {
                        'id': swap.pk,
                        'type': swap.type,
                        'status': swap.status,
                        'requester': swap.requester.get_display_name(),
                        'request_item': swap.request_item.title,
                        'created_at': swap.created_at,
                    }
                    for swap in recent_swaps
                ],
            },
            'points_stats': get_system_stats(),
        }
