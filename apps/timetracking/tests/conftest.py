from datetime import datetime, time, timedelta

import pytest
from django.utils import timezone

from apps.timetracking.models import TimeEntry, EntryType


def at(day, hour, minute=0):
    return timezone.make_aware(datetime.combine(day, time(hour, minute)))


@pytest.fixture
def yesterday():
    return timezone.localdate() - timedelta(days=1)


@pytest.fixture
def entry(user, project, yesterday):
    """A one hour billable entry logged yesterday at $60/h."""
    start = at(yesterday, 14)
    return TimeEntry.objects.create(
        owner=user,
        project=project,
        description='Homepage layout',
        start_time=start,
        end_time=start + timedelta(hours=1),
        duration=3600,
        billable=True,
        hourly_rate=6000,
        entry_type=EntryType.TRACKED,
    )


@pytest.fixture
def running_entry(user, project):
    """A timer started ten minutes ago."""
    return TimeEntry.objects.create(
        owner=user,
        project=project,
        description='Bug triage',
        start_time=timezone.now() - timedelta(minutes=10),
    )
