from rest_framework import serializers
from .models import PointsLedgerEntry


class LedgerEntrySerializer(serializers.ModelSerializer):
    """One line of a user's points history."""

    item = serializers.SerializerMethodField()
    swap = serializers.SerializerMethodField()
    admin = serializers.SerializerMethodField()

    class Meta:
        model = PointsLedgerEntry
        fields = [
            'id',
            'delta',
            'reason',
            'previous_balance',
            'new_balance',
            'description',
            'item',
            'swap',
            'admin',
            'created_at',
        ]
        read_only_fields = fields

    def get_item(self, obj):
        if obj.item is None:
            return None
        return {'id': obj.item.pk, 'title': obj.item.title, 'images': obj.item.images}

    def get_swap(self, obj):
        if obj.swap is None:
            return None
        return {'id': obj.swap.pk, 'type': obj.swap.type, 'status': obj.swap.status}

    def get_admin(self, obj):
        if obj.admin is None:
            return None
        return {'id': obj.admin.pk, 'display_name': obj.admin.get_display_name()}


class BalanceSerializer(serializers.Serializer):
    balance = serializers.IntegerField()
    total_earned = serializers.IntegerField()
    total_spent = serializers.IntegerField()
    total_transactions = serializers.IntegerField()


class PointsAdjustmentSerializer(serializers.Serializer):
    """Validate a manual balance adjustment."""

    delta = serializers.IntegerField()
    description = serializers.CharField(max_length=200, required=False, allow_blank=True)

    def validate_delta(self, value):
        if value == 0:
            raise serializers.ValidationError('Delta cannot be zero')
        return value
