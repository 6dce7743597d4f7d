"""
Management command to install the built-in contract templates.

Safe to run repeatedly; existing system templates are left as they are.

Usage:
    python manage.py seed_templates
"""

from django.core.management.base import BaseCommand

from apps.contracts.services import seed_system_templates


class Command(BaseCommand):
    help = 'Install the system contract templates'

    def handle(self, *args, **options):
        created = seed_system_templates()

        if not created:
            self.stdout.write(self.style.SUCCESS('System templates already installed.'))
            return

        for name in created:
            self.stdout.write(f'  Created template: {name}')
        self.stdout.write(self.style.SUCCESS(f'Installed {len(created)} template(s).'))
