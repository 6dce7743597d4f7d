"""Stripe Checkout sessions for the public invoice payment page."""

import logging
from typing import Optional

from django.conf import settings

from apps.common.money import percentage_of
from apps.invoices.models import Invoice, InvoiceStatus
from apps.invoices.services import get_invoice_by_token
from apps.payments import stripe_client

from .exceptions import (
    StripeNotConnectedError,
    InvoiceNotPayableError,
    InvalidCheckoutAmountError,
)

logger = logging.getLogger(__name__)


def resolve_checkout_amount(invoice: Invoice, amount: Optional[int] = None) -> int:
    """
    Amount to charge. Defaults to the balance due; a custom amount needs
    partial payments enabled and must fall between the minimum payment
    (capped at the balance) and the balance.
    """
    balance = invoice.balance_due
    if amount is None or amount == balance:
        return balance

    if not invoice.allow_partial_payments:
        raise InvalidCheckoutAmountError("Partial payments are not allowed for this invoice")
    if amount <= 0:
        raise InvalidCheckoutAmountError("Payment amount must be greater than zero")
    if amount > balance:
        raise InvalidCheckoutAmountError("Payment amount exceeds the balance due")

    minimum = min(invoice.minimum_payment or 0, balance)
    if amount < minimum:
        raise InvalidCheckoutAmountError(f"Minimum payment is {minimum} cents")
    return amount


def platform_fee(amount: int) -> int:
    return percentage_of(amount, settings.STRIPE_PLATFORM_FEE_PERCENT)


def create_checkout_session(pay_token: str, amount: Optional[int] = None) -> dict:
    """
    Start a card payment for an invoice.

    Returns:
        ``{session_id, url}``

    Raises:
        InvoiceNotFoundError: If the token matches no sent invoice
        InvoiceNotPayableError: If the invoice is paid or cancelled
        StripeNotConnectedError: If the owner cannot receive payments
        InvalidCheckoutAmountError: If ``amount`` breaks the payment terms
    """
    invoice = get_invoice_by_token(pay_token)

    if invoice.status == InvoiceStatus.PAID:
        raise InvoiceNotPayableError("Invoice already paid")
    if invoice.status == InvoiceStatus.CANCELLED:
        raise InvoiceNotPayableError("Invoice has been cancelled")

    owner = invoice.owner
    if not owner.stripe_account_id or not owner.stripe_connected:
        raise StripeNotConnectedError("Payment not available. The developer has not connected Stripe.")

    charge = resolve_checkout_amount(invoice, amount)
    description = f"Invoice {invoice.invoice_number}"
    if invoice.project:
        description = f"{invoice.project.name} - {description}"

    pay_page = f'{settings.APP_URL}/pay/{pay_token}'
    session = stripe_client.create_checkout_session(
        amount=charge,
        currency=invoice.currency,
        product_name=f"Invoice {invoice.invoice_number}",
        description=description,
        customer_email=invoice.client.email,
        application_fee=platform_fee(charge),
        destination=owner.stripe_account_id,
        metadata={
            'invoice_id': str(invoice.id),
            'invoice_number': invoice.invoice_number,
            'payment_amount': str(charge),
            'client_id': str(invoice.client_id),
            'project_id': str(invoice.project_id or ''),
        },
        success_url=f'{pay_page}?success=true',
        cancel_url=f'{pay_page}?cancelled=true',
    )
    logger.info(
        "Checkout session %s created for invoice %s (%s cents)",
        session['session_id'], invoice.invoice_number, charge
    )
    return session
