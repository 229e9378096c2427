# ==========================================
# apps/swaps/admin.py
# ==========================================

from django.contrib import admin
from apps.swaps.models import Swap


@admin.register(Swap)
class SwapAdmin(admin.ModelAdmin):
    """
    Read-only view of swaps.

    Transitions move points and item statuses, so they only happen through
    the swap services.
    """

    list_display = [
        'id',
        'type',
        'status',
        'requester',
        'request_item',
        'offered_item',
        'points_used',
        'created_at'
    ]
    list_filter = ['type', 'status', 'created_at']
    search_fields = [
        'requester__email',
        'request_item__title',
        'offered_item__title'
    ]
    readonly_fields = [
        'type',
        'status',
        'request_item',
        'offered_item',
        'points_used',
        'requester',
        'request_item_owner',
        'offered_item_owner',
        'notes',
        'completed_at',
        'created_at',
        'updated_at'
    ]
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False
