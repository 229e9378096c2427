# ==========================================
# apps/points/admin.py
# ==========================================

from django.contrib import admin
from apps.points.models import PointsLedgerEntry


@admin.register(PointsLedgerEntry)
class PointsLedgerEntryAdmin(admin.ModelAdmin):
    """
    Read-only ledger browser.

    Entries are immutable; corrections are new entries made through the
    admin API's points adjustment.
    """

    list_display = [
        'user',
        'sequence',
        'delta',
        'reason',
        'previous_balance',
        'new_balance',
        'item',
        'swap',
        'created_at'
    ]
    list_filter = ['reason', 'created_at']
    search_fields = ['user__email', 'description']
    readonly_fields = [
        'user',
        'sequence',
        'delta',
        'reason',
        'previous_balance',
        'new_balance',
        'description',
        'item',
        'swap',
        'admin',
        'created_at'
    ]
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
