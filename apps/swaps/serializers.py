from rest_framework import serializers

from apps.accounts.serializers import UserPublicSerializer
from apps.items.models import Item
from .models import Swap, SwapType


class SwapItemSerializer(serializers.ModelSerializer):
    """Item summary embedded in a swap."""

    class Meta:
        model = Item
        fields = ['id', 'title', 'images', 'type', 'point_cost', 'status']
        read_only_fields = fields


class SwapSerializer(serializers.ModelSerializer):
    """Swap with both items and all parties expanded."""

    request_item = SwapItemSerializer(read_only=True)
    offered_item = SwapItemSerializer(read_only=True)
    requester = UserPublicSerializer(read_only=True)
    request_item_owner = UserPublicSerializer(read_only=True)
    offered_item_owner = UserPublicSerializer(read_only=True)

    class Meta:
        model = Swap
        fields = [
            'id',
            'type',
            'status',
            'points_used',
            'request_item',
            'offered_item',
            'requester',
            'request_item_owner',
            'offered_item_owner',
            'notes',
            'completed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class SwapRequestSerializer(serializers.Serializer):
    """Validate a swap request payload."""

    request_item_id = serializers.UUIDField()
    type = serializers.ChoiceField(choices=SwapType.choices)
    offered_item_id = serializers.UUIDField(required=False, allow_null=True)
    points_used = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True)

    def validate(self, attrs):
        """The payload must match the swap type."""
        if attrs['type'] == SwapType.SWAP:
            if not attrs.get('offered_item_id'):
                raise serializers.ValidationError({
                    'offered_item_id': 'Offered item is required for swap type'
                })
            if attrs.get('points_used') is not None:
                raise serializers.ValidationError({
                    'points_used': 'Points cannot be offered in an item swap'
                })
        else:
            if attrs.get('points_used') is None:
                raise serializers.ValidationError({
                    'points_used': 'Points used is required for points type'
                })
            if attrs.get('offered_item_id'):
                raise serializers.ValidationError({
                    'offered_item_id': 'An item cannot be offered in a points swap'
                })
        return attrs


class RedeemSerializer(serializers.Serializer):
    """Validate a direct redemption payload."""

    points_used = serializers.IntegerField(min_value=1)
