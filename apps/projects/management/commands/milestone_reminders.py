"""
Management command to notify freelancers about upcoming and missed milestones.

Meant to run daily from a scheduler.

Usage:
    python manage.py milestone_reminders
    python manage.py milestone_reminders --days 5 --date 2024-06-30
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.projects.services import send_milestone_reminders
from apps.projects.services.milestone_management import DUE_SOON_DAYS


class Command(BaseCommand):
    help = 'Notify owners about milestones due soon or just overdue'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=DUE_SOON_DAYS,
            help=f'Warn this many days ahead (default: {DUE_SOON_DAYS})',
        )
        parser.add_argument(
            '--date',
            help='Treat this ISO date as today (defaults to the current date)',
        )

    def handle(self, *args, **options):
        today = None
        if options['date']:
            try:
                today = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date: {options['date']}")

        if options['days'] < 1:
            raise CommandError('--days must be at least 1')

        counts = send_milestone_reminders(today=today, due_soon_days=options['days'])

        self.stdout.write(self.style.SUCCESS(
            f"Sent {counts['due_soon']} due-soon and {counts['overdue']} overdue reminder(s)."
        ))
