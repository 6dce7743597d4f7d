"""
Stripe webhook processing.

Events are verified, then dispatched by type. Invoice credits go through
``apply_payment`` keyed by the payment intent id, so a redelivered event
never credits twice. Anything unexpected propagates so the view answers
500 and Stripe retries the delivery.
"""

import logging
from typing import Optional

import stripe

from apps.accounts.models import User
from apps.invoices.models import Invoice, InvoicePayment, PaymentMethod
from apps.invoices.services import (
    apply_payment,
    announce_payment,
    InvoiceNotFoundError,
    InvoiceAlreadyPaidError,
    DuplicatePaymentError,
    InvalidInvoiceStateError,
    InvalidPaymentAmountError,
)
from apps.notifications.services import notify_payment_failed, notify_stripe_connected
from apps.payments import stripe_client

from .exceptions import WebhookSignatureError

logger = logging.getLogger(__name__)


def _metadata(obj) -> dict:
    return obj.get('metadata') or {}


def _to_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def credit_invoice(*, invoice_id, payment_intent_id: str, amount: Optional[int]) -> Optional[Invoice]:
    """
    Credit a Stripe payment to an invoice and announce it.

    Returns the invoice, or None when the payment was skipped. Skipped
    payments that can never be credited (cancelled invoice, unusable amount)
    are logged at error level for manual reconciliation; the event is still
    acknowledged.
    """
    if amount is None:
        try:
            amount = Invoice.objects.values_list('total', flat=True).get(id=invoice_id)
        except Invoice.DoesNotExist:
            logger.warning("Webhook references unknown invoice %s", invoice_id)
            return None

    try:
        invoice, _ = apply_payment(
            invoice_id=invoice_id,
            amount=amount,
            payment_method=PaymentMethod.STRIPE,
            stripe_payment_id=payment_intent_id,
        )
    except (DuplicatePaymentError, InvoiceAlreadyPaidError) as e:
        logger.info("Skipping payment %s for invoice %s: %s", payment_intent_id, invoice_id, e)
        return None
    except InvoiceNotFoundError:
        logger.warning("Webhook references unknown invoice %s", invoice_id)
        return None
    except (InvalidInvoiceStateError, InvalidPaymentAmountError) as e:
        logger.error(
            "Payment %s of %s for invoice %s could not be credited: %s",
            payment_intent_id, amount, invoice_id, e
        )
        return None

    announce_payment(invoice, amount)
    return invoice


def handle_checkout_completed(session) -> dict:
    metadata = _metadata(session)
    invoice_id = metadata.get('invoice_id')
    payment_intent_id = session.get('payment_intent')
    if not invoice_id or not payment_intent_id:
        logger.warning("Checkout session %s has no invoice or payment intent", session.get('id'))
        return {'credited': False}

    amount = _to_int(metadata.get('payment_amount')) or _to_int(session.get('amount_total'))
    invoice = credit_invoice(invoice_id=invoice_id, payment_intent_id=payment_intent_id, amount=amount)
    return {'credited': invoice is not None, 'invoice_id': invoice_id}


def handle_payment_intent_succeeded(intent) -> dict:
    """Fallback for checkouts whose session event never arrived."""
    invoice_id = _metadata(intent).get('invoice_id')
    if not invoice_id:
        return {'credited': False}
    if InvoicePayment.objects.filter(stripe_payment_id=intent.get('id')).exists():
        return {'credited': False, 'invoice_id': invoice_id}

    amount = _to_int(_metadata(intent).get('payment_amount')) or _to_int(intent.get('amount_received'))
    invoice = credit_invoice(invoice_id=invoice_id, payment_intent_id=intent.get('id'), amount=amount)
    return {'credited': invoice is not None, 'invoice_id': invoice_id}


def handle_payment_failed(intent) -> dict:
    error = intent.get('last_payment_error') or {}
    invoice_id = _metadata(intent).get('invoice_id')
    logger.warning(
        "Payment %s failed for invoice %s: %s %s",
        intent.get('id'), invoice_id, error.get('code'), error.get('message')
    )
    if invoice_id:
        invoice = Invoice.objects.select_related('owner').filter(id=invoice_id).first()
        if invoice:
            notify_payment_failed(invoice=invoice, reason=error.get('message') or '')
    return {'invoice_id': invoice_id}


def handle_account_updated(account) -> dict:
    user_id = _metadata(account).get('user_id')
    user = None
    if user_id:
        user = User.objects.filter(id=user_id).first()
    if user is None:
        user = User.objects.filter(stripe_account_id=account.get('id')).first()
    if user is None:
        logger.warning("No user for Stripe account %s", account.get('id'))
        return {'user_id': None}

    connected = bool(account.get('charges_enabled') and account.get('payouts_enabled'))
    newly_connected = connected and not user.stripe_connected
    if user.stripe_connected != connected:
        user.stripe_connected = connected
        user.save(update_fields=['stripe_connected', 'updated_at'])
        logger.info("Stripe account %s connected=%s", account.get('id'), connected)
    if newly_connected:
        notify_stripe_connected(user=user)
    return {'user_id': str(user.id), 'connected': connected}


EVENT_HANDLERS = {
    'checkout.session.completed': handle_checkout_completed,
    'payment_intent.succeeded': handle_payment_intent_succeeded,
    'payment_intent.payment_failed': handle_payment_failed,
    'account.updated': handle_account_updated,
}


def process_webhook(payload: bytes, signature: Optional[str]) -> dict:
    """
    Verify and handle one webhook delivery.

    Returns:
        ``{event_type, handled, result}``

    Raises:
        WebhookSignatureError: If the signature is missing or invalid
    """
    if not signature:
        raise WebhookSignatureError("Missing Stripe signature")

    try:
        event = stripe_client.construct_event(payload, signature)
    except stripe.error.SignatureVerificationError as e:
        logger.error("Webhook signature verification failed: %s", e)
        raise WebhookSignatureError("Invalid signature") from e
    except ValueError as e:
        logger.error("Webhook payload could not be parsed: %s", e)
        raise WebhookSignatureError("Invalid payload") from e

    event_type = event['type']
    handler = EVENT_HANDLERS.get(event_type)
    logger.info("Stripe webhook %s (%s)", event.get('id'), event_type)
    if handler is None:
        return {'event_type': event_type, 'handled': False, 'result': None}

    result = handler(event['data']['object'])
    return {'event_type': event_type, 'handled': True, 'result': result}
