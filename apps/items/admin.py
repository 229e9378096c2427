# ==========================================
# apps/items/admin.py
# ==========================================

from django.contrib import admin
from apps.items.models import Item


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    """
    Admin interface for listings.

    Moderation goes through the API so the upload bonus is paid; status is
    read-only here.
    """

    list_display = [
        'title',
        'uploader',
        'category',
        'type',
        'point_cost',
        'status',
        'views',
        'created_at'
    ]
    list_filter = [
        'status',
        'type',
        'category',
        'size',
        'condition',
        'created_at'
    ]
    search_fields = [
        'title',
        'description',
        'uploader__email',
        'uploader__display_name'
    ]
    readonly_fields = [
        'status',
        'views',
        'approved_by',
        'approved_at',
        'redeemed_by',
        'redeemed_at',
        'created_at',
        'updated_at'
    ]
    raw_id_fields = ['uploader']
    filter_horizontal = ['likes']
    date_hierarchy = 'created_at'
