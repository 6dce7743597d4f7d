from datetime import timedelta

import pytest
from django.utils import timezone

from apps.invoices.models import InvoiceStatus


@pytest.fixture
def connected_user(user):
    """The test user with a fully enabled Stripe Connect account."""
    user.stripe_account_id = 'acct_123'
    user.stripe_connected = True
    user.save()
    return user


@pytest.fixture
def payable_invoice(invoice, connected_user):
    """A sent $1,500.00 invoice whose owner can take card payments."""
    invoice.status = InvoiceStatus.SENT
    invoice.sent_at = timezone.now()
    invoice.due_date = timezone.localdate() + timedelta(days=14)
    invoice.save()
    return invoice
