import uuid
from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command

from apps.accounts.actors import SYSTEM_ADMIN, actor_for
from apps.common.exceptions import ForbiddenError
from apps.items.models import Item, ItemStatus
from apps.items.services import (
    ItemNotFoundError,
    ItemStateError,
    ItemValidationError,
    approve_item,
    get_pending_items,
    list_items_for_admin,
    remove_item,
)
from apps.points.models import LedgerReason, PointsLedgerEntry
from apps.points.services import LedgerWriteError


@pytest.mark.django_db
class TestApproveItem:
    """Tests for approve_item()."""

    def test_approval_pays_upload_bonus(self, user, admin_user, make_item):
        item = make_item(user, status=ItemStatus.PENDING)

        approved = approve_item(
            item_id=item.pk, status=ItemStatus.APPROVED, actor=actor_for(admin_user),
        )

        user.refresh_from_db()
        assert approved.status == ItemStatus.APPROVED
        assert approved.approved_by == admin_user
        assert approved.approved_at is not None
        assert user.points == 50

        entry = PointsLedgerEntry.objects.get(user=user)
        assert entry.delta == 50
        assert entry.reason == LedgerReason.UPLOAD
        assert entry.item == item

    def test_rejection_moves_no_points(self, user, admin_user, make_item):
        item = make_item(user, status=ItemStatus.PENDING)

        rejected = approve_item(
            item_id=item.pk, status=ItemStatus.REJECTED,
            actor=actor_for(admin_user), reason='Photos missing',
        )

        user.refresh_from_db()
        assert rejected.status == ItemStatus.REJECTED
        assert rejected.admin_notes == 'Photos missing'
        assert user.points == 0
        assert not PointsLedgerEntry.objects.exists()

    def test_only_pending_items(self, user, admin_user, make_item):
        item = make_item(user)

        with pytest.raises(ItemStateError):
            approve_item(
                item_id=item.pk, status=ItemStatus.APPROVED, actor=actor_for(admin_user),
            )

        assert not PointsLedgerEntry.objects.exists()

    def test_second_approval_pays_nothing(self, user, admin_user, make_item):
        item = make_item(user, status=ItemStatus.PENDING)
        approve_item(item_id=item.pk, status=ItemStatus.APPROVED, actor=actor_for(admin_user))

        with pytest.raises(ItemStateError):
            approve_item(item_id=item.pk, status=ItemStatus.APPROVED, actor=actor_for(admin_user))

        assert PointsLedgerEntry.objects.count() == 1

    def test_invalid_decision(self, user, admin_user, make_item):
        item = make_item(user, status=ItemStatus.PENDING)

        with pytest.raises(ItemValidationError):
            approve_item(item_id=item.pk, status=ItemStatus.LISTED, actor=actor_for(admin_user))

    def test_requires_admin(self, user, other_user, make_item):
        item = make_item(user, status=ItemStatus.PENDING)

        with pytest.raises(ForbiddenError):
            approve_item(item_id=item.pk, status=ItemStatus.APPROVED, actor=actor_for(other_user))

    def test_unknown_item(self, admin_user):
        with pytest.raises(ItemNotFoundError):
            approve_item(
                item_id=uuid.uuid4(), status=ItemStatus.APPROVED, actor=actor_for(admin_user),
            )

    def test_system_admin_leaves_approver_empty(self, user, make_item):
        item = make_item(user, status=ItemStatus.PENDING)

        approved = approve_item(item_id=item.pk, status=ItemStatus.APPROVED, actor=SYSTEM_ADMIN)

        user.refresh_from_db()
        assert approved.approved_by is None
        assert user.points == 50

    def test_bonus_failure_keeps_approval(self, user, admin_user, make_item, monkeypatch, caplog):
        item = make_item(user, status=ItemStatus.PENDING)

        def failing_entry(**kwargs):
            raise LedgerWriteError('ledger offline')

        monkeypatch.setattr('apps.items.services.moderation.create_entry', failing_entry)

        approved = approve_item(
            item_id=item.pk, status=ItemStatus.APPROVED, actor=actor_for(admin_user),
        )

        item.refresh_from_db()
        assert approved.status == ItemStatus.APPROVED
        assert item.status == ItemStatus.APPROVED
        assert 'Upload bonus' in caplog.text

    def test_zero_bonus_pays_nothing(self, user, admin_user, make_item, settings):
        settings.POINTS_PER_UPLOAD = 0
        item = make_item(user, status=ItemStatus.PENDING)

        approve_item(item_id=item.pk, status=ItemStatus.APPROVED, actor=actor_for(admin_user))

        assert not PointsLedgerEntry.objects.exists()


@pytest.mark.django_db
class TestModerationQueries:
    """Tests for the moderation queue and admin listing."""

    def test_pending_oldest_first(self, user, make_item):
        first = make_item(user, title='First upload', status=ItemStatus.PENDING)
        second = make_item(user, title='Second upload', status=ItemStatus.PENDING)
        make_item(user, title='Already listed')
        Item.objects.filter(pk=first.pk).update(
            created_at=second.created_at - timedelta(minutes=5)
        )

        assert list(get_pending_items()) == [first, second]

    def test_admin_listing_filters(self, user, make_item):
        make_item(user, title='Pending coat', status=ItemStatus.PENDING)
        make_item(user, title='Listed scarf')

        assert list_items_for_admin().count() == 2
        assert list_items_for_admin(status=ItemStatus.PENDING).count() == 1
        assert list_items_for_admin(search='scarf').count() == 1

    def test_remove_item(self, user, admin_user, make_item):
        item = make_item(user)

        remove_item(item_id=item.pk, actor=actor_for(admin_user))

        assert list_items_for_admin().count() == 0

    def test_remove_item_requires_admin(self, user, make_item):
        item = make_item(user)

        with pytest.raises(ForbiddenError):
            remove_item(item_id=item.pk, actor=actor_for(user))


@pytest.mark.django_db
class TestApprovePendingItemsCommand:
    """Tests for the approve_pending_items management command."""

    def test_dry_run_changes_nothing(self, user, make_item):
        item = make_item(user, status=ItemStatus.PENDING)
        out = StringIO()

        call_command('approve_pending_items', '--dry-run', stdout=out)

        item.refresh_from_db()
        assert item.status == ItemStatus.PENDING
        assert 'Found 1 pending item(s)' in out.getvalue()

    def test_approves_queue_as_platform(self, user, make_item):
        item = make_item(user, status=ItemStatus.PENDING)
        out = StringIO()

        call_command('approve_pending_items', '--reason', 'Bulk review', stdout=out)

        item.refresh_from_db()
        user.refresh_from_db()
        assert item.status == ItemStatus.APPROVED
        assert item.approved_by is None
        assert item.admin_notes == 'Bulk review'
        assert user.points == 50
        assert 'Approved 1 item(s).' in out.getvalue()

    def test_empty_queue(self, db):
        out = StringIO()

        call_command('approve_pending_items', stdout=out)

        assert 'No pending items.' in out.getvalue()
