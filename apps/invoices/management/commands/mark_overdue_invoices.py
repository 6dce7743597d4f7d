"""
Management command to flag unpaid invoices whose due date has passed.

Meant to run daily from a scheduler.

Usage:
    python manage.py mark_overdue_invoices
    python manage.py mark_overdue_invoices --date 2024-06-30
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.invoices.services import mark_overdue_invoices


class Command(BaseCommand):
    help = 'Move sent, viewed and partially paid invoices past their due date to overdue'

    def add_arguments(self, parser):
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

        count = mark_overdue_invoices(today=today)

        if count == 0:
            self.stdout.write(self.style.SUCCESS('No invoices became overdue.'))
            return

        self.stdout.write(self.style.SUCCESS(f'Marked {count} invoice(s) as overdue.'))
