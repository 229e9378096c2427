from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
import uuid


class SwapType(models.TextChoices):
    SWAP = 'swap', 'Item for item'
    POINTS = 'points', 'Item for points'


class SwapStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    REJECTED = 'rejected', 'Rejected'
    COMPLETED = 'completed', 'Completed'


# Allowed lifecycle moves: pending -> accepted -> completed, pending -> rejected.
TRANSITIONS = {
    SwapStatus.PENDING: (SwapStatus.ACCEPTED, SwapStatus.REJECTED),
    SwapStatus.ACCEPTED: (SwapStatus.COMPLETED,),
    SwapStatus.REJECTED: (),
    SwapStatus.COMPLETED: (),
}


class Swap(models.Model):
    """
    A request to exchange a listed item for another item or for points.

    Exactly one of ``offered_item`` and ``points_used`` is set, matching
    ``type``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    type = models.CharField(max_length=10, choices=SwapType.choices)
    status = models.CharField(
        max_length=20,
        choices=SwapStatus.choices,
        default=SwapStatus.PENDING,
    )

    request_item = models.ForeignKey(
        'items.Item',
        on_delete=models.CASCADE,
        related_name='swap_requests',
    )
    offered_item = models.ForeignKey(
        'items.Item',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='swap_offers',
    )
    points_used = models.PositiveIntegerField(null=True, blank=True)

    # Parties
    requester = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='swaps_requested',
    )
    request_item_owner = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='swaps_received',
    )
    offered_item_owner = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='swaps_offered',
    )

    notes = models.TextField(max_length=500, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'swaps'
        indexes = [
            models.Index(fields=['requester', 'status']),
            models.Index(fields=['request_item_owner', 'status']),
            models.Index(fields=['request_item']),
            models.Index(fields=['offered_item']),
            models.Index(fields=['status']),
            models.Index(fields=['-created_at']),
        ]
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(
                        type=SwapType.SWAP,
                        offered_item__isnull=False,
                        points_used__isnull=True,
                    )
                    | Q(
                        type=SwapType.POINTS,
                        offered_item__isnull=True,
                        points_used__isnull=False,
                        points_used__gt=0,
                    )
                ),
                name='swap_payload_matches_type',
            ),
        ]

    def __str__(self):
        return f"{self.type} swap for {self.request_item_id} ({self.status})"

    def clean(self):
        if self.type == SwapType.POINTS:
            if self.offered_item_id:
                raise ValidationError({
                    'offered_item': 'Offered item should be empty for points type swaps'
                })
            if not self.points_used or self.points_used <= 0:
                raise ValidationError({
                    'points_used': 'Points used is required and must be positive for points type'
                })
        elif self.type == SwapType.SWAP:
            if not self.offered_item_id:
                raise ValidationError({
                    'offered_item': 'Offered item is required for swap type'
                })
            if self.points_used:
                raise ValidationError({
                    'points_used': 'Points used must be empty for swap type'
                })

    def can_transition_to(self, status):
        return status in TRANSITIONS[self.status]

    def involves(self, user):
        """True if ``user`` is the requester or one of the item owners."""
        return user.pk in (
            self.requester_id,
            self.request_item_owner_id,
            self.offered_item_owner_id,
        )

    def is_owner(self, user):
        """True if ``user`` owns one of the items in the swap."""
        return user.pk in (self.request_item_owner_id, self.offered_item_owner_id)

    def item_ids(self):
        return [pk for pk in (self.request_item_id, self.offered_item_id) if pk]
