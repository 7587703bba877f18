"""
Mark late hire-purchase agreements OVERDUE or DEFAULTED.

Meant to run daily (cron or a scheduler).

Usage:
    python manage.py refresh_purchase_statuses
    python manage.py refresh_purchase_statuses --date 2025-06-30
"""

from datetime import datetime

from django.core.management.base import BaseCommand, CommandError

from apps.purchases.services import refresh_overdue_statuses


class Command(BaseCommand):
    help = 'Mark late purchases as OVERDUE and long-late ones as DEFAULTED'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            help='Evaluate as of this date (YYYY-MM-DD) instead of today',
        )

    def handle(self, *args, **options):
        today = None
        if options['date']:
            try:
                today = datetime.strptime(options['date'], '%Y-%m-%d').date()
            except ValueError:
                raise CommandError('--date must be YYYY-MM-DD')

        result = refresh_overdue_statuses(today=today)
        self.stdout.write(
            self.style.SUCCESS(
                f"{result['overdue']} purchase(s) marked overdue, "
                f"{result['defaulted']} marked defaulted."
            )
        )
