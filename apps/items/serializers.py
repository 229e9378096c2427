from rest_framework import serializers

from apps.accounts.serializers import UserPublicSerializer
from .models import Item, ItemType, ItemStatus


class ItemListSerializer(serializers.ModelSerializer):
    """Lightweight item card for browse and trending lists."""

    uploader = UserPublicSerializer(read_only=True)
    like_count = serializers.SerializerMethodField()
    image = serializers.SerializerMethodField()

    class Meta:
        model = Item
        fields = [
            'id',
            'title',
            'category',
            'size',
            'condition',
            'type',
            'point_cost',
            'status',
            'image',
            'uploader',
            'views',
            'like_count',
            'created_at',
        ]
        read_only_fields = fields

    def get_like_count(self, obj):
        # Browse querysets annotate the count; single objects fall back to a query.
        count = getattr(obj, 'num_likes', None)
        return count if count is not None else obj.like_count

    def get_image(self, obj):
        return obj.images[0] if obj.images else None


class ItemSerializer(serializers.ModelSerializer):
    """Full item detail."""

    uploader = UserPublicSerializer(read_only=True)
    like_count = serializers.SerializerMethodField()
    is_liked = serializers.SerializerMethodField()

    class Meta:
        model = Item
        fields = [
            'id',
            'title',
            'description',
            'category',
            'size',
            'condition',
            'tags',
            'images',
            'type',
            'point_cost',
            'status',
            'uploader',
            'views',
            'like_count',
            'is_liked',
            'approved_at',
            'redeemed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_like_count(self, obj):
        return obj.like_count

    def get_is_liked(self, obj):
        request = self.context.get('request')
        if not request or not request.user.is_authenticated:
            return False
        return obj.likes.filter(pk=request.user.pk).exists()


class ItemWriteSerializer(serializers.Serializer):
    """Validate listing input for create and update."""

    title = serializers.CharField(min_length=3, max_length=100)
    description = serializers.CharField(min_length=10, max_length=1000)
    category = serializers.ChoiceField(choices=Item._meta.get_field('category').choices)
    size = serializers.ChoiceField(choices=Item._meta.get_field('size').choices)
    condition = serializers.ChoiceField(choices=Item._meta.get_field('condition').choices)
    type = serializers.ChoiceField(choices=ItemType.choices)
    point_cost = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    tags = serializers.ListField(
        child=serializers.CharField(max_length=20),
        required=False,
        max_length=10,
    )
    images = serializers.ListField(
        child=serializers.URLField(),
        required=False,
        max_length=5,
    )

    def validate(self, attrs):
        """Point cost is required for points items and forbidden otherwise."""
        item_type = attrs.get('type', getattr(self.instance, 'type', None))
        if 'point_cost' in attrs or 'type' in attrs:
            point_cost = attrs.get('point_cost', getattr(self.instance, 'point_cost', None))
            if item_type == ItemType.POINTS and not point_cost:
                raise serializers.ValidationError({
                    'point_cost': 'Point cost is required for points-type items'
                })
            if item_type == ItemType.SWAP and attrs.get('point_cost') is not None:
                raise serializers.ValidationError({
                    'point_cost': 'Point cost is only allowed on points-type items'
                })
        return attrs


class ItemWithSwapStatusSerializer(ItemListSerializer):
    """Own item with the status of its latest swap."""

    swap_status = serializers.CharField(read_only=True)

    class Meta(ItemListSerializer.Meta):
        fields = ItemListSerializer.Meta.fields + ['swap_status']
        read_only_fields = fields


class AdminItemSerializer(ItemListSerializer):
    """Item row in the admin panel."""

    uploader_email = serializers.EmailField(source='uploader.email', read_only=True)

    class Meta(ItemListSerializer.Meta):
        fields = ItemListSerializer.Meta.fields + [
            'description', 'uploader_email', 'admin_notes', 'approved_at',
        ]
        read_only_fields = fields


class ItemApprovalSerializer(serializers.Serializer):
    """Moderation decision."""

    status = serializers.ChoiceField(choices=[
        (ItemStatus.APPROVED, 'Approved'),
        (ItemStatus.REJECTED, 'Rejected'),
    ])
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True)


class LikeResponseSerializer(serializers.Serializer):
    likes = serializers.IntegerField()
    is_liked = serializers.BooleanField()
