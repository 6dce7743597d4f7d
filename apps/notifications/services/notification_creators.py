"""
Typed constructors for in-app notifications.

Each business event that the freelancer should hear about has one function
here so titles and messages stay consistent across the code base.
"""

from typing import Optional
from uuid import UUID

from apps.accounts.models import User
from apps.common.money import format_money
from apps.notifications.models import Notification, NotificationType


def create_notification(
    *,
    user: User,
    type: str,
    title: str,
    message: str,
    resource_type: str = '',
    resource_id: Optional[UUID] = None,
    metadata: Optional[dict] = None
) -> Notification:
    return Notification.objects.create(
        user=user,
        type=type,
        title=title,
        message=message,
        resource_type=resource_type,
        resource_id=resource_id,
        metadata=metadata or {},
    )


# =============================================================================
# Invoices & payments
# =============================================================================

def notify_invoice_paid(*, invoice, amount: int) -> Notification:
    return create_notification(
        user=invoice.owner,
        type=NotificationType.INVOICE_PAID,
        title='Payment received',
        message=(
            f"{invoice.client.name} paid invoice {invoice.invoice_number} "
            f"({format_money(amount, invoice.currency)})"
        ),
        resource_type='invoice',
        resource_id=invoice.id,
        metadata={'amount': amount, 'invoice_number': invoice.invoice_number},
    )


def notify_invoice_partially_paid(*, invoice, amount: int) -> Notification:
    remaining = invoice.balance_due
    return create_notification(
        user=invoice.owner,
        type=NotificationType.INVOICE_PARTIALLY_PAID,
        title='Partial payment received',
        message=(
            f"{invoice.client.name} paid {format_money(amount, invoice.currency)} "
            f"on invoice {invoice.invoice_number}. "
            f"{format_money(remaining, invoice.currency)} remaining."
        ),
        resource_type='invoice',
        resource_id=invoice.id,
        metadata={
            'amount': amount,
            'remaining': remaining,
            'invoice_number': invoice.invoice_number,
        },
    )


def notify_invoice_viewed(*, invoice) -> Notification:
    return create_notification(
        user=invoice.owner,
        type=NotificationType.INVOICE_VIEWED,
        title='Invoice viewed',
        message=f"{invoice.client.name} viewed invoice {invoice.invoice_number}",
        resource_type='invoice',
        resource_id=invoice.id,
    )


def notify_invoice_overdue(*, invoice) -> Notification:
    return create_notification(
        user=invoice.owner,
        type=NotificationType.INVOICE_OVERDUE,
        title='Invoice overdue',
        message=(
            f"Invoice {invoice.invoice_number} for {invoice.client.name} is overdue "
            f"({format_money(invoice.balance_due, invoice.currency)} outstanding)"
        ),
        resource_type='invoice',
        resource_id=invoice.id,
    )


def notify_payment_reminder_sent(*, invoice) -> Notification:
    return create_notification(
        user=invoice.owner,
        type=NotificationType.PAYMENT_REMINDER_SENT,
        title='Payment reminder sent',
        message=f"Reminder for invoice {invoice.invoice_number} sent to {invoice.client.email}",
        resource_type='invoice',
        resource_id=invoice.id,
    )


def notify_payment_failed(*, invoice, reason: str = '') -> Notification:
    message = f"A payment attempt for invoice {invoice.invoice_number} failed"
    if reason:
        message = f"{message}: {reason}"
    return create_notification(
        user=invoice.owner,
        type=NotificationType.PAYMENT_FAILED,
        title='Payment failed',
        message=message,
        resource_type='invoice',
        resource_id=invoice.id,
    )


# =============================================================================
# Contracts
# =============================================================================

def notify_contract_signed(*, contract) -> Notification:
    return create_notification(
        user=contract.owner,
        type=NotificationType.CONTRACT_SIGNED,
        title='Contract signed',
        message=f"{contract.client.name} signed \"{contract.name}\"",
        resource_type='contract',
        resource_id=contract.id,
    )


def notify_contract_declined(*, contract) -> Notification:
    message = f"{contract.client.name} declined \"{contract.name}\""
    if contract.decline_reason:
        message = f"{message}: {contract.decline_reason}"
    return create_notification(
        user=contract.owner,
        type=NotificationType.CONTRACT_DECLINED,
        title='Contract declined',
        message=message,
        resource_type='contract',
        resource_id=contract.id,
    )


def notify_contract_viewed(*, contract) -> Notification:
    return create_notification(
        user=contract.owner,
        type=NotificationType.CONTRACT_VIEWED,
        title='Contract viewed',
        message=f"{contract.client.name} opened \"{contract.name}\"",
        resource_type='contract',
        resource_id=contract.id,
    )


def notify_contract_reminder_sent(*, contract) -> Notification:
    return create_notification(
        user=contract.owner,
        type=NotificationType.CONTRACT_REMINDER_SENT,
        title='Contract reminder sent',
        message=f"Reminder for \"{contract.name}\" sent to {contract.client.email}",
        resource_type='contract',
        resource_id=contract.id,
    )


# =============================================================================
# Projects & clients
# =============================================================================

def notify_milestone_due_soon(*, milestone) -> Notification:
    return create_notification(
        user=milestone.project.owner,
        type=NotificationType.MILESTONE_DUE_SOON,
        title='Milestone due soon',
        message=f"\"{milestone.name}\" on {milestone.project.name} is due {milestone.due_date:%b %d}",
        resource_type='milestone',
        resource_id=milestone.id,
    )


def notify_milestone_overdue(*, milestone) -> Notification:
    return create_notification(
        user=milestone.project.owner,
        type=NotificationType.MILESTONE_OVERDUE,
        title='Milestone overdue',
        message=f"\"{milestone.name}\" on {milestone.project.name} was due {milestone.due_date:%b %d}",
        resource_type='milestone',
        resource_id=milestone.id,
    )


def notify_new_client(*, client) -> Notification:
    return create_notification(
        user=client.owner,
        type=NotificationType.NEW_CLIENT,
        title='New client added',
        message=f"{client.name} was added to your clients",
        resource_type='client',
        resource_id=client.id,
    )


# =============================================================================
# Account
# =============================================================================

def notify_welcome(*, user: User) -> Notification:
    return create_notification(
        user=user,
        type=NotificationType.WELCOME,
        title='Welcome to Zovo',
        message='Add your first client, then create a project to start tracking work.',
    )


def notify_stripe_connected(*, user: User) -> Notification:
    return create_notification(
        user=user,
        type=NotificationType.STRIPE_CONNECTED,
        title='Stripe connected',
        message='Your Stripe account is ready. Clients can now pay invoices online.',
    )
