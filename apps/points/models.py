from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
import uuid


class LedgerReason(models.TextChoices):
    UPLOAD = 'upload', 'Upload bonus'
    SWAP = 'swap', 'Swap transfer'
    REDEEM = 'redeem', 'Item redemption'
    MANUAL = 'manual', 'Manual'
    ITEM_REDEMPTION = 'item_redemption', 'Swap completion redemption'
    ADMIN_ADJUSTMENT = 'admin_adjustment', 'Admin adjustment'


class PointsLedgerEntry(models.Model):
    """
    One immutable movement of a user's points balance.

    Both balance snapshots are stored so the history can be audited without
    replaying it. ``new_balance`` is floored at zero, so when an overspend
    reaches the ledger ``new_balance - previous_balance`` is smaller in
    magnitude than ``delta``: the row records the clamped truth.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='ledger_entries',
    )
    # Position in the user's history, 1-based; orders entries written within
    # the same clock tick.
    sequence = models.PositiveIntegerField()
    delta = models.IntegerField()
    reason = models.CharField(max_length=20, choices=LedgerReason.choices)
    previous_balance = models.PositiveIntegerField()
    new_balance = models.PositiveIntegerField()
    description = models.CharField(max_length=200, blank=True, null=True)

    # Cross references
    item = models.ForeignKey(
        'items.Item',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ledger_entries',
    )
    swap = models.ForeignKey(
        'swaps.Swap',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ledger_entries',
    )
    admin = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ledger_adjustments',
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'points_ledger'
        indexes = [
            models.Index(fields=['user', '-sequence']),
            models.Index(fields=['item']),
            models.Index(fields=['swap']),
            models.Index(fields=['reason']),
        ]
        ordering = ['-created_at']
        get_latest_by = 'created_at'
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'sequence'],
                name='ledger_unique_user_sequence',
            ),
            models.CheckConstraint(
                condition=~Q(delta=0),
                name='ledger_delta_nonzero',
            ),
            models.CheckConstraint(
                condition=(
                    Q(new_balance=F('previous_balance') + F('delta'))
                    | Q(new_balance=0, delta__lt=0)
                ),
                name='ledger_new_balance_clamped',
            ),
        ]

    def __str__(self):
        sign = '+' if self.delta > 0 else ''
        return f"{self.user_id}: {sign}{self.delta} ({self.reason})"

    @staticmethod
    def clamp(previous_balance, delta):
        """Balance after applying ``delta``, never below zero."""
        return max(0, previous_balance + delta)

    def clean(self):
        if self.delta == 0:
            raise ValidationError({'delta': 'Delta cannot be zero'})
        if self.new_balance != self.clamp(self.previous_balance, self.delta):
            raise ValidationError({
                'new_balance': 'New balance must equal max(0, previous balance + delta)'
            })

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError('Ledger entries are immutable')
        self.full_clean(exclude=['user', 'item', 'swap', 'admin'])
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError('Ledger entries cannot be deleted')
