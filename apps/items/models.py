from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q
import uuid


class ItemCategory(models.TextChoices):
    TOPS = 'tops', 'Tops'
    BOTTOMS = 'bottoms', 'Bottoms'
    DRESSES = 'dresses', 'Dresses'
    OUTERWEAR = 'outerwear', 'Outerwear'
    SHOES = 'shoes', 'Shoes'
    ACCESSORIES = 'accessories', 'Accessories'
    OTHER = 'other', 'Other'


class ItemSize(models.TextChoices):
    XS = 'XS', 'XS'
    S = 'S', 'S'
    M = 'M', 'M'
    L = 'L', 'L'
    XL = 'XL', 'XL'
    XXL = 'XXL', 'XXL'
    ONE_SIZE = 'OS', 'One size'
    NOT_APPLICABLE = 'NA', 'N/A'


class ItemCondition(models.TextChoices):
    NEW = 'new', 'New'
    LIKE_NEW = 'like-new', 'Like new'
    GOOD = 'good', 'Good'
    FAIR = 'fair', 'Fair'
    POOR = 'poor', 'Poor'


class ItemType(models.TextChoices):
    SWAP = 'swap', 'Swap'
    POINTS = 'points', 'Points'


class ItemStatus(models.TextChoices):
    PENDING = 'pending', 'Pending review'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'
    LISTED = 'listed', 'Listed'
    RESERVED = 'reserved', 'Reserved'
    SWAPPED = 'swapped', 'Swapped'
    REDEEMED = 'redeemed', 'Redeemed'


# Statuses in which an item is visible in browse and open to new requests.
AVAILABLE_STATUSES = (ItemStatus.APPROVED, ItemStatus.LISTED)


class Item(models.Model):
    """A garment listed for exchange."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    title = models.CharField(max_length=100, validators=[MinLengthValidator(3)])
    description = models.TextField(max_length=1000, validators=[MinLengthValidator(10)])
    category = models.CharField(max_length=20, choices=ItemCategory.choices)
    size = models.CharField(max_length=3, choices=ItemSize.choices)
    condition = models.CharField(max_length=10, choices=ItemCondition.choices)
    tags = models.JSONField(default=list, blank=True)
    # URLs served by the external image store
    images = models.JSONField(default=list, blank=True)

    type = models.CharField(max_length=10, choices=ItemType.choices)
    point_cost = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
    )

    status = models.CharField(
        max_length=20,
        choices=ItemStatus.choices,
        default=ItemStatus.PENDING,
    )

    uploader = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='items',
    )

    # Moderation
    approved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_items',
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    admin_notes = models.TextField(blank=True, null=True)

    # Direct redemption
    redeemed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='redeemed_items',
    )
    redeemed_at = models.DateTimeField(null=True, blank=True)

    # Engagement
    views = models.PositiveIntegerField(default=0)
    likes = models.ManyToManyField(
        'accounts.User',
        related_name='liked_items',
        blank=True,
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'items'
        indexes = [
            models.Index(fields=['status']),
            models.Index(fields=['category']),
            models.Index(fields=['type']),
            models.Index(fields=['uploader', 'status']),
            models.Index(fields=['point_cost']),
            models.Index(fields=['-created_at']),
        ]
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(type=ItemType.POINTS, point_cost__isnull=False, point_cost__gt=0)
                    | Q(type=ItemType.SWAP, point_cost__isnull=True)
                ),
                name='item_point_cost_matches_type',
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"

    def clean(self):
        """Point cost is required for points items and forbidden otherwise."""
        if self.type == ItemType.POINTS and (not self.point_cost or self.point_cost <= 0):
            raise ValidationError({
                'point_cost': 'Point cost is required and must be positive for points-type items'
            })
        if self.type == ItemType.SWAP and self.point_cost is not None:
            raise ValidationError({
                'point_cost': 'Point cost is only allowed on points-type items'
            })

    @property
    def is_available(self):
        return self.status in AVAILABLE_STATUSES

    @property
    def like_count(self):
        return self.likes.count()

    def increment_views(self):
        """Bump the view counter without a read-modify-write race."""
        Item.objects.filter(pk=self.pk).update(views=F('views') + 1)
        self.refresh_from_db(fields=['views'])
