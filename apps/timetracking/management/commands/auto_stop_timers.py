"""
Management command to stop timers left running overnight.

Meant to run shortly after midnight.

Usage:
    python manage.py auto_stop_timers
"""

from django.core.management.base import BaseCommand

from apps.timetracking.services import auto_stop_timers


class Command(BaseCommand):
    help = 'Stop timers still running from a previous day at the midnight after they started'

    def handle(self, *args, **options):
        count = auto_stop_timers()

        if count == 0:
            self.stdout.write(self.style.SUCCESS('No running timers to stop.'))
            return

        self.stdout.write(self.style.SUCCESS(f'Stopped {count} timer(s).'))
