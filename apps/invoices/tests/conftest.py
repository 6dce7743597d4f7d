from datetime import datetime, timedelta

import pytest
from django.utils import timezone

from apps.invoices.models import InvoiceStatus
from apps.timetracking.models import TimeEntry


@pytest.fixture
def sent_invoice(invoice):
    """The draft invoice moved to sent, due in a week."""
    invoice.status = InvoiceStatus.SENT
    invoice.sent_at = timezone.now()
    invoice.due_date = timezone.localdate() + timedelta(days=7)
    invoice.save()
    return invoice


@pytest.fixture
def time_entry(user, project):
    """A completed 90 minute billable entry at $80/h."""
    start = timezone.make_aware(datetime(2030, 3, 4, 10, 0))
    return TimeEntry.objects.create(
        owner=user,
        project=project,
        description='Wireframes',
        start_time=start,
        end_time=start + timedelta(minutes=90),
        duration=5400,
        billable=True,
        hourly_rate=8000,
    )
