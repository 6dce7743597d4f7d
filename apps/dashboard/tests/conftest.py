from datetime import timedelta

import pytest
from django.utils import timezone

from apps.invoices.models import InvoiceStatus


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def outstanding_invoice(invoice, today):
    """The $1,500.00 invoice sent and due in ten days."""
    invoice.status = InvoiceStatus.SENT
    invoice.sent_at = timezone.now()
    invoice.due_date = today + timedelta(days=10)
    invoice.save()
    return invoice
