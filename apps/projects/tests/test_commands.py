from datetime import date
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.notifications.models import Notification, NotificationType


@pytest.mark.django_db
class TestMilestoneRemindersCommand:

    def test_sends_reminders(self, user, project):
        design, build = project.milestones.order_by('order')
        design.due_date = date(2030, 6, 4)
        design.save()
        build.due_date = date(2030, 5, 31)
        build.save()

        out = StringIO()
        call_command('milestone_reminders', '--date', '2030-06-01', stdout=out)

        assert 'Sent 1 due-soon and 1 overdue reminder(s).' in out.getvalue()
        assert Notification.objects.filter(user=user, type=NotificationType.MILESTONE_DUE_SOON).count() == 1
        assert Notification.objects.filter(user=user, type=NotificationType.MILESTONE_OVERDUE).count() == 1

    def test_custom_days(self, user, milestone):
        milestone.due_date = date(2030, 6, 8)
        milestone.save()

        out = StringIO()
        call_command('milestone_reminders', '--date', '2030-06-01', '--days', '7', stdout=out)

        assert 'Sent 1 due-soon and 0 overdue reminder(s).' in out.getvalue()

    def test_invalid_days(self, db):
        with pytest.raises(CommandError):
            call_command('milestone_reminders', '--days', '0')

    def test_invalid_date(self, db):
        with pytest.raises(CommandError):
            call_command('milestone_reminders', '--date', '01/06/2030')
