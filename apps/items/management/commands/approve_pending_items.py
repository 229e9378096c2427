"""
Management command to approve the moderation queue as the platform.

Approvals made here have no admin user behind them, so ``approved_by`` stays
empty. Uploaders still receive the upload bonus.

Usage:
    python manage.py approve_pending_items
    python manage.py approve_pending_items --dry-run
"""

from django.core.management.base import BaseCommand
from apps.accounts.actors import SYSTEM_ADMIN
from apps.items.models import ItemStatus
from apps.items.services import approve_item, get_pending_items, ItemsServiceError


class Command(BaseCommand):
    help = 'Approve all pending items as the system admin'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List pending items without approving them',
        )
        parser.add_argument(
            '--reason',
            default='',
            help='Note stored on each approved item',
        )

    def handle(self, *args, **options):
        pending = list(get_pending_items())

        if not pending:
            self.stdout.write(self.style.SUCCESS('No pending items.'))
            return

        self.stdout.write(f'\nFound {len(pending)} pending item(s):\n')
        for item in pending:
            self.stdout.write(f'  - {item.title} | {item.uploader.email}')

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('\n--dry-run mode: No changes made.'))
            return

        approved = 0
        for item in pending:
            try:
                approve_item(
                    item_id=item.pk,
                    status=ItemStatus.APPROVED,
                    actor=SYSTEM_ADMIN,
                    reason=options['reason'] or None,
                )
            except ItemsServiceError as e:
                # Another moderator got there first.
                self.stdout.write(self.style.WARNING(f'  skipped {item.pk}: {e}'))
                continue
            approved += 1

        self.stdout.write(self.style.SUCCESS(f'\nApproved {approved} item(s).'))
