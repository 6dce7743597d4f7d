"""Read access to invoices through their pay token."""

import logging

from django.db import transaction
from django.utils import timezone

from apps.invoices.models import Invoice, InvoiceStatus
from apps.notifications.emails import pay_url
from apps.notifications.services import notify_invoice_viewed

from .exceptions import InvoiceNotFoundError

logger = logging.getLogger(__name__)


def get_invoice_by_token(pay_token: str) -> Invoice:
    """
    Drafts are never exposed publicly.

    Raises:
        InvoiceNotFoundError: If no sent invoice carries this token
    """
    try:
        return (
            Invoice.objects
            .select_related('owner', 'client', 'project')
            .exclude(status=InvoiceStatus.DRAFT)
            .get(pay_token=pay_token)
        )
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError("Invoice not found")


def record_invoice_view(invoice: Invoice) -> Invoice:
    """First view of a sent invoice moves it to viewed and tells the owner."""
    if invoice.status != InvoiceStatus.SENT or invoice.viewed_at is not None:
        return invoice

    with transaction.atomic():
        updated = Invoice.objects.filter(
            id=invoice.id,
            status=InvoiceStatus.SENT,
            viewed_at__isnull=True,
        ).update(status=InvoiceStatus.VIEWED, viewed_at=timezone.now(), updated_at=timezone.now())
        if updated:
            invoice.refresh_from_db()
            notify_invoice_viewed(invoice=invoice)
            logger.info("Invoice %s viewed by client", invoice.invoice_number)

    return invoice


def get_public_invoice(pay_token: str) -> dict:
    """
    Client-facing view of an invoice.

    Returns:
        Dict with the invoice, its payment history and the business block
    """
    invoice = record_invoice_view(get_invoice_by_token(pay_token))

    return {
        'invoice': {
            'id': invoice.id,
            'invoice_number': invoice.invoice_number,
            'status': invoice.status,
            'line_items': invoice.line_items,
            'subtotal': invoice.subtotal,
            'tax_rate': invoice.tax_rate,
            'tax': invoice.tax,
            'total': invoice.total,
            'paid_amount': invoice.paid_amount,
            'balance_due': invoice.balance_due,
            'currency': invoice.currency,
            'due_date': invoice.due_date,
            'notes': invoice.notes,
            'allow_partial_payments': invoice.allow_partial_payments,
            'minimum_payment': invoice.minimum_payment,
            'sent_at': invoice.sent_at,
            'paid_at': invoice.paid_at,
            'pay_url': pay_url(invoice),
        },
        'client': {
            'name': invoice.client.name,
            'email': invoice.client.email,
            'company': invoice.client.company,
            'address': invoice.client.address,
        },
        'project': {'name': invoice.project.name} if invoice.project else None,
        'payments': [
            {
                'amount': payment.amount,
                'paid_at': payment.paid_at,
                'payment_method': payment.payment_method,
            }
            for payment in invoice.payments.order_by('paid_at')
        ],
        'business': invoice.owner.business_info(),
        'stripe_enabled': invoice.owner.stripe_connected,
    }
