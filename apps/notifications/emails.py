"""
Transactional email.

Bodies are rendered from ``templates/emails/<name>.txt``. Delivery problems
are logged and reported through the return value; they never undo the
business change that triggered the email.
"""

import logging
from typing import Optional

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from apps.common.money import format_money

logger = logging.getLogger(__name__)


def send_email(
    *,
    to: str,
    subject: str,
    template: str,
    context: dict,
    reply_to: Optional[str] = None
) -> bool:
    """
    Render ``emails/<template>.txt`` and send it.

    Returns:
        True when the backend accepted the message, False otherwise
    """
    if not to:
        logger.warning("Skipping email '%s': no recipient", subject)
        return False

    body = render_to_string(f'emails/{template}.txt', context)
    message = EmailMultiAlternatives(
        subject=subject,
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to],
        reply_to=[reply_to] if reply_to else None,
    )
    try:
        message.send()
    except Exception:
        logger.exception("Failed to send email '%s' to %s", subject, to)
        return False

    logger.info("Sent email '%s' to %s", subject, to)
    return True


def pay_url(invoice) -> str:
    return f'{settings.APP_URL}/pay/{invoice.pay_token}'


def sign_url(contract) -> str:
    return f'{settings.APP_URL}/sign/{contract.sign_token}'


def _invoice_context(invoice, **extra) -> dict:
    owner = invoice.owner
    context = {
        'invoice': invoice,
        'client_name': invoice.client.name,
        'developer_name': owner.get_business_name(),
        'developer_email': owner.email,
        'total': format_money(invoice.total, invoice.currency),
        'paid_amount': format_money(invoice.paid_amount, invoice.currency),
        'balance_due': format_money(invoice.balance_due, invoice.currency),
        'due_date': invoice.due_date.strftime('%B %d, %Y') if invoice.due_date else None,
        'pay_url': pay_url(invoice),
        'dashboard_url': f'{settings.APP_URL}/dashboard/invoices/{invoice.id}',
    }
    context.update(extra)
    return context


def _contract_context(contract, **extra) -> dict:
    owner = contract.owner
    context = {
        'contract': contract,
        'client_name': contract.client.name,
        'developer_name': owner.get_business_name(),
        'developer_email': owner.email,
        'sign_url': sign_url(contract),
        'expires_at': contract.expires_at.strftime('%B %d, %Y') if contract.expires_at else None,
        'dashboard_url': f'{settings.APP_URL}/dashboard/contracts/{contract.id}',
    }
    context.update(extra)
    return context


# =============================================================================
# Invoice emails
# =============================================================================

def send_invoice_email(invoice) -> bool:
    return send_email(
        to=invoice.client.email,
        subject=f"Invoice {invoice.invoice_number} from {invoice.owner.get_business_name()}",
        template='invoice_sent',
        context=_invoice_context(invoice),
        reply_to=invoice.owner.email,
    )


def send_payment_reminder_email(invoice) -> bool:
    return send_email(
        to=invoice.client.email,
        subject=f"Payment Reminder: Invoice {invoice.invoice_number}",
        template='payment_reminder',
        context=_invoice_context(invoice),
        reply_to=invoice.owner.email,
    )


def send_invoice_paid_emails(invoice, amount: int) -> None:
    """Receipt to the client, and a heads-up to the owner if they opted in."""
    context = _invoice_context(invoice, amount=format_money(amount, invoice.currency))
    send_email(
        to=invoice.client.email,
        subject=f"Payment Received - Invoice {invoice.invoice_number}",
        template='invoice_paid_client',
        context=context,
        reply_to=invoice.owner.email,
    )
    if invoice.owner.email_invoice_paid:
        send_email(
            to=invoice.owner.email,
            subject=f"Payment received: Invoice {invoice.invoice_number}",
            template='invoice_paid_owner',
            context=context,
        )


def send_partial_payment_emails(invoice, amount: int) -> None:
    percent_paid = round(invoice.paid_amount * 100 / invoice.total) if invoice.total else 0
    context = _invoice_context(
        invoice,
        amount=format_money(amount, invoice.currency),
        percent_paid=percent_paid,
    )
    send_email(
        to=invoice.client.email,
        subject=f"Partial Payment Received - Invoice {invoice.invoice_number}",
        template='partial_payment_client',
        context=context,
        reply_to=invoice.owner.email,
    )
    if invoice.owner.email_invoice_paid:
        send_email(
            to=invoice.owner.email,
            subject=f"Partial payment received: Invoice {invoice.invoice_number}",
            template='partial_payment_owner',
            context=context,
        )


# =============================================================================
# Contract emails
# =============================================================================

def send_contract_email(contract) -> bool:
    return send_email(
        to=contract.client.email,
        subject=f"Contract from {contract.owner.get_business_name()}: {contract.name}",
        template='contract_sent',
        context=_contract_context(contract),
        reply_to=contract.owner.email,
    )


def send_contract_reminder_email(contract, message: str = '') -> bool:
    return send_email(
        to=contract.client.email,
        subject=f"Reminder: Contract from {contract.owner.get_business_name()}: {contract.name}",
        template='contract_reminder',
        context=_contract_context(contract, custom_message=message),
        reply_to=contract.owner.email,
    )


def send_contract_signed_emails(contract) -> None:
    signed_at = contract.signed_at.strftime('%B %d, %Y at %H:%M UTC') if contract.signed_at else ''
    context = _contract_context(contract, signed_at=signed_at)
    send_email(
        to=contract.client_signed_email or contract.client.email,
        subject=f"Contract Signed: {contract.name}",
        template='contract_signed_client',
        context=context,
        reply_to=contract.owner.email,
    )
    if contract.owner.email_contract_signed:
        send_email(
            to=contract.owner.email,
            subject=f"Contract Signed: {contract.name}",
            template='contract_signed_owner',
            context=context,
        )


def send_contract_declined_email(contract) -> bool:
    return send_email(
        to=contract.owner.email,
        subject=f"Contract Declined by {contract.client.name}",
        template='contract_declined',
        context=_contract_context(contract, reason=contract.decline_reason),
    )
