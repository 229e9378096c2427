"""
Management command to compare cached point balances with the ledger.

The ledger is authoritative. ``User.points`` is rewritten from it when the
two disagree and ``--fix`` is given.

Usage:
    python manage.py reconcile_points
    python manage.py reconcile_points --fix
"""

from django.core.management.base import BaseCommand
from apps.accounts.models import User
from apps.points.services import reconcile_user_balance


class Command(BaseCommand):
    help = 'Check User.points against the points ledger'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Rewrite drifted balances from the ledger',
        )

    def handle(self, *args, **options):
        fix = options['fix']
        drifted = 0

        for user_id, email in User.objects.values_list('id', 'email').iterator():
            cached, ledger = reconcile_user_balance(user_id, fix=fix)
            if cached != ledger:
                drifted += 1
                self.stdout.write(f'  - {email}: cached {cached}, ledger {ledger}')

        if drifted == 0:
            self.stdout.write(self.style.SUCCESS('All balances match the ledger.'))
            return

        if fix:
            self.stdout.write(self.style.SUCCESS(f'Fixed {drifted} balance(s).'))
        else:
            self.stdout.write(
                self.style.WARNING(f'{drifted} balance(s) drifted. Run with --fix to repair.')
            )
