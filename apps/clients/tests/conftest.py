import pytest
from datetime import timedelta
from django.utils import timezone

from apps.clients.models import Client, ClientStatus
from apps.invoices.models import Invoice, InvoiceStatus


@pytest.fixture
def lead(db, user):
    """Create and return a lead."""
    return Client.objects.create(
        owner=user,
        name='Initech',
        email='peter@initech.example.com',
        company='Initech',
    )


@pytest.fixture
def paid_invoice_factory(user):
    """Create paid invoices that took ``days`` from sending to payment."""
    def factory(client, days, number):
        sent_at = timezone.now() - timedelta(days=60)
        return Invoice.objects.create(
            owner=user,
            client=client,
            invoice_number=f'INV-{number:04d}',
            status=InvoiceStatus.PAID,
            total=10000,
            paid_amount=10000,
            sent_at=sent_at,
            paid_at=sent_at + timedelta(days=days),
        )
    return factory


@pytest.fixture
def inactive_client(db, user):
    return Client.objects.create(
        owner=user,
        name='Umbrella',
        email='ops@umbrella.example.com',
        status=ClientStatus.INACTIVE,
    )
