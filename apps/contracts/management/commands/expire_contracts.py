"""
Management command to expire contracts the client never signed.

Meant to run daily from a scheduler.

Usage:
    python manage.py expire_contracts
"""

from django.core.management.base import BaseCommand

from apps.contracts.services import expire_contracts


class Command(BaseCommand):
    help = 'Move sent and viewed contracts past their expiry date to expired'

    def handle(self, *args, **options):
        count = expire_contracts()

        if count == 0:
            self.stdout.write(self.style.SUCCESS('No contracts expired.'))
            return

        self.stdout.write(self.style.SUCCESS(f'Expired {count} contract(s).'))
