"""
Crediting money against invoices.

Every payment, whether it arrives through a Stripe webhook or is recorded
by hand, goes through ``apply_payment`` so that the paid amount, status and
milestone stay consistent. A Stripe payment intent is credited at most once.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.invoices.models import Invoice, InvoicePayment, InvoiceStatus, PaymentMethod
from apps.notifications import emails
from apps.notifications.services import notify_invoice_paid, notify_invoice_partially_paid
from apps.projects.services import mark_milestone_paid

from .calculations import derive_payment_status
from .exceptions import (
    InvoiceNotFoundError,
    InvoiceAlreadyPaidError,
    InvalidInvoiceStateError,
    DuplicatePaymentError,
    InvalidPaymentAmountError,
)
from .invoice_management import get_invoice

logger = logging.getLogger(__name__)


@transaction.atomic
def apply_payment(
    *,
    invoice_id: UUID,
    amount: int,
    payment_method: str = PaymentMethod.MANUAL,
    stripe_payment_id: Optional[str] = None,
    note: str = '',
    paid_at=None
) -> tuple:
    """
    Credit ``amount`` cents to an invoice.

    The invoice row is locked for the duration of the transaction so two
    concurrent credits cannot both read the old paid amount.

    Returns:
        (invoice, payment)

    Raises:
        InvoiceNotFoundError: If the invoice does not exist
        DuplicatePaymentError: If ``stripe_payment_id`` was already credited
        InvoiceAlreadyPaidError: If nothing is left to pay
        InvalidInvoiceStateError: If the invoice is cancelled
        InvalidPaymentAmountError: If ``amount`` is not positive
    """
    try:
        invoice = (
            Invoice.objects
            .select_for_update()
            .select_related('owner', 'client', 'milestone')
            .get(id=invoice_id)
        )
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError("Invoice not found")

    if stripe_payment_id and InvoicePayment.objects.filter(stripe_payment_id=stripe_payment_id).exists():
        raise DuplicatePaymentError(f"Payment {stripe_payment_id} was already recorded")
    if invoice.status == InvoiceStatus.PAID:
        raise InvoiceAlreadyPaidError("Invoice is already paid")
    if invoice.status == InvoiceStatus.CANCELLED:
        raise InvalidInvoiceStateError("Cannot pay a cancelled invoice")
    if amount is None or amount <= 0:
        raise InvalidPaymentAmountError("Payment amount must be greater than zero")

    if amount > invoice.balance_due:
        logger.warning(
            "Overpayment on invoice %s: %s received, %s due",
            invoice.invoice_number, amount, invoice.balance_due
        )

    paid_at = paid_at or timezone.now()
    try:
        with transaction.atomic():
            payment = InvoicePayment.objects.create(
                invoice=invoice,
                amount=amount,
                payment_method=payment_method,
                stripe_payment_id=stripe_payment_id or None,
                paid_at=paid_at,
                note=note,
            )
    except IntegrityError:
        raise DuplicatePaymentError(f"Payment {stripe_payment_id} was already recorded")

    invoice.paid_amount += amount
    invoice.payment_method = payment_method
    invoice.status = derive_payment_status(invoice.total, invoice.paid_amount, invoice.status)
    update_fields = ['paid_amount', 'payment_method', 'status', 'updated_at']
    if invoice.status == InvoiceStatus.PAID:
        invoice.paid_at = paid_at
        update_fields.append('paid_at')
    invoice.save(update_fields=update_fields)

    if invoice.status == InvoiceStatus.PAID and invoice.milestone:
        mark_milestone_paid(invoice.milestone)

    logger.info(
        "Applied payment of %s to invoice %s (%s, status %s)",
        amount, invoice.invoice_number, payment_method, invoice.status
    )
    return invoice, payment


def announce_payment(invoice: Invoice, amount: int) -> None:
    """
    Notify the owner and email receipts after a committed payment.

    Failures are logged; the payment itself is never undone.
    """
    try:
        if invoice.status == InvoiceStatus.PAID:
            notify_invoice_paid(invoice=invoice, amount=amount)
            emails.send_invoice_paid_emails(invoice, amount)
        else:
            notify_invoice_partially_paid(invoice=invoice, amount=amount)
            emails.send_partial_payment_emails(invoice, amount)
    except Exception:
        logger.exception("Failed to announce payment on invoice %s", invoice.invoice_number)


def mark_paid(
    *,
    owner: User,
    invoice_id: UUID,
    amount: Optional[int] = None,
    payment_method: str = PaymentMethod.MANUAL,
    note: str = '',
    paid_at=None
) -> tuple:
    """
    Record a payment received outside Stripe. ``amount`` defaults to the
    remaining balance.

    Returns:
        (invoice, payment)
    """
    invoice = get_invoice(owner=owner, invoice_id=invoice_id)
    if invoice.status == InvoiceStatus.PAID:
        raise InvoiceAlreadyPaidError("Invoice is already paid")
    if amount is None:
        amount = invoice.balance_due
    elif amount > invoice.balance_due:
        raise InvalidPaymentAmountError("Payment amount exceeds the balance due")

    return apply_payment(
        invoice_id=invoice.id,
        amount=amount,
        payment_method=payment_method,
        note=note,
        paid_at=paid_at,
    )


def list_payments(*, owner: User, invoice_id: UUID) -> QuerySet[InvoicePayment]:
    invoice = get_invoice(owner=owner, invoice_id=invoice_id)
    return invoice.payments.order_by('paid_at')
