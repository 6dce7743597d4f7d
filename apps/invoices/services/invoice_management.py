"""
Invoice management service.

Covers creation (manual, from a milestone, from tracked time), editing and
the draft → sent → overdue lifecycle. Crediting money lives in
``payment_application``.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.clients.models import Client
from apps.clients.services import ClientNotFoundError
from apps.invoices.models import Invoice, InvoiceStatus
from apps.notifications import emails
from apps.notifications.services import notify_invoice_overdue, notify_payment_reminder_sent
from apps.projects.models import Project, Milestone, MilestoneStatus
from apps.projects.services import (
    ProjectNotFoundError,
    MilestoneNotFoundError,
    mark_milestone_invoiced,
    reset_milestone_to_completed,
)
from apps.timetracking.models import TimeEntry, EntryType
from apps.timetracking.services import mark_as_invoiced, unlock_invoiced_entries

from .calculations import build_line_items, calculate_totals, derive_payment_status
from .exceptions import (
    InvoiceNotFoundError,
    InvalidLineItemsError,
    InvoiceNotEditableError,
    InvoiceHasPaymentsError,
    InvalidInvoiceStateError,
    MilestoneAlreadyBilledError,
    TimeEntriesNotBillableError,
)
from .numbering import next_invoice_number

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (
    InvoiceStatus.DRAFT,
    InvoiceStatus.SENT,
    InvoiceStatus.VIEWED,
    InvoiceStatus.OVERDUE,
)
SENDABLE_STATUSES = EDITABLE_STATUSES + (InvoiceStatus.PARTIALLY_PAID,)
REMINDABLE_STATUSES = (
    InvoiceStatus.SENT,
    InvoiceStatus.VIEWED,
    InvoiceStatus.PARTIALLY_PAID,
    InvoiceStatus.OVERDUE,
)
OVERDUE_CANDIDATES = (
    InvoiceStatus.SENT,
    InvoiceStatus.VIEWED,
    InvoiceStatus.PARTIALLY_PAID,
)

DEFAULT_DUE_DAYS = 14


# =============================================================================
# Queries
# =============================================================================

def list_invoices(
    *,
    owner: User,
    status: Optional[str] = None,
    client_id: Optional[UUID] = None,
    project_id: Optional[UUID] = None
) -> QuerySet[Invoice]:
    queryset = Invoice.objects.filter(owner=owner).select_related('client', 'project')

    if status:
        queryset = queryset.filter(status=status)
    if client_id:
        queryset = queryset.filter(client_id=client_id)
    if project_id:
        queryset = queryset.filter(project_id=project_id)

    return queryset.order_by('-created_at')


def get_invoice(*, owner: User, invoice_id: UUID) -> Invoice:
    """
    Raises:
        InvoiceNotFoundError: If the invoice does not exist for this owner
    """
    try:
        return (
            Invoice.objects
            .select_related('client', 'project', 'milestone', 'owner')
            .get(id=invoice_id, owner=owner)
        )
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError("Invoice not found")


def _lock_invoice(owner: User, invoice_id: UUID) -> Invoice:
    try:
        return (
            Invoice.objects
            .select_for_update()
            .select_related('client', 'milestone', 'owner')
            .get(id=invoice_id, owner=owner)
        )
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError("Invoice not found")


# =============================================================================
# Creation
# =============================================================================

def _resolve_client(owner: User, client_id: UUID) -> Client:
    try:
        return Client.objects.get(id=client_id, owner=owner)
    except Client.DoesNotExist:
        raise ClientNotFoundError("Client not found")


def _resolve_project(owner: User, project_id: Optional[UUID]) -> Optional[Project]:
    if not project_id:
        return None
    try:
        return Project.objects.get(id=project_id, owner=owner)
    except Project.DoesNotExist:
        raise ProjectNotFoundError("Project not found")


def _resolve_milestone(owner: User, milestone_id: Optional[UUID]) -> Optional[Milestone]:
    if not milestone_id:
        return None
    try:
        milestone = (
            Milestone.objects
            .select_for_update()
            .select_related('project')
            .get(id=milestone_id, project__owner=owner)
        )
    except Milestone.DoesNotExist:
        raise MilestoneNotFoundError("Milestone not found")

    if milestone.is_billed:
        raise MilestoneAlreadyBilledError("Milestone has already been invoiced")
    return milestone


def _insert_invoice(*, owner: User, max_retries: int = 5, **fields) -> Invoice:
    """
    Insert with the next invoice number, retrying if a concurrent request
    took the same number or pay token.
    """
    for attempt in range(max_retries):
        try:
            with transaction.atomic():
                return Invoice.objects.create(
                    owner=owner,
                    invoice_number=next_invoice_number(owner),
                    **fields
                )
        except IntegrityError:
            if attempt == max_retries - 1:
                raise
            logger.warning("Invoice number collision for user %s, retrying", owner.id)
    raise RuntimeError("Unexpected error in invoice creation")


def _validate_minimum_payment(minimum_payment: Optional[int], total: int) -> None:
    if minimum_payment is not None and (minimum_payment < 0 or minimum_payment > total):
        raise InvalidLineItemsError("Minimum payment must be between 0 and the invoice total")


@transaction.atomic
def create_invoice(
    *,
    owner: User,
    client_id: UUID,
    line_items: list,
    tax_rate: Decimal = Decimal('0'),
    project_id: Optional[UUID] = None,
    milestone_id: Optional[UUID] = None,
    due_date: Optional[date] = None,
    notes: str = '',
    currency: Optional[str] = None,
    allow_partial_payments: bool = False,
    minimum_payment: Optional[int] = None
) -> Invoice:
    """
    Create a draft invoice. A linked milestone is marked invoiced.

    Raises:
        ClientNotFoundError, ProjectNotFoundError, MilestoneNotFoundError:
            If a referenced record is not owned by ``owner``
        MilestoneAlreadyBilledError: If the milestone was already invoiced
        InvalidLineItemsError: If the line items are empty or invalid
    """
    client = _resolve_client(owner, client_id)
    project = _resolve_project(owner, project_id)
    milestone = _resolve_milestone(owner, milestone_id)

    if project and project.client_id != client.id:
        raise InvalidLineItemsError("Project belongs to a different client")
    if milestone:
        if project and milestone.project_id != project.id:
            raise InvalidLineItemsError("Milestone belongs to a different project")
        project = project or milestone.project

    items = build_line_items(line_items)
    totals = calculate_totals(items, tax_rate)
    _validate_minimum_payment(minimum_payment, totals['total'])

    invoice = _insert_invoice(
        owner=owner,
        client=client,
        project=project,
        milestone=milestone,
        line_items=items,
        tax_rate=tax_rate,
        currency=currency or owner.currency,
        due_date=due_date,
        notes=notes,
        allow_partial_payments=allow_partial_payments,
        minimum_payment=minimum_payment,
        **totals
    )

    if milestone:
        mark_milestone_invoiced(milestone)

    return invoice


@transaction.atomic
def create_invoice_from_milestone(
    *,
    owner: User,
    milestone_id: UUID,
    due_in_days: int = DEFAULT_DUE_DAYS
) -> Invoice:
    """One-line invoice for a milestone's amount, due in ``due_in_days`` days."""
    milestone = _resolve_milestone(owner, milestone_id)
    project = milestone.project

    return create_invoice(
        owner=owner,
        client_id=project.client_id,
        project_id=project.id,
        milestone_id=milestone.id,
        line_items=[{
            'description': f"{project.name}: {milestone.name}",
            'quantity': 1,
            'unit_price': milestone.amount,
        }],
        due_date=timezone.localdate() + timedelta(days=due_in_days),
        notes=milestone.description,
    )


def time_entry_line_item(entry: TimeEntry) -> dict:
    """Line item for one time entry: quantity in hours, priced at its rate."""
    started = timezone.localtime(entry.start_time)
    description = f"{started:%b} {started.day} - {entry.description or 'Time tracked'}"
    if entry.entry_type == EntryType.MANUAL:
        description += ' (manual)'

    hours = Decimal(entry.duration or 0) / Decimal(3600)
    return {
        'description': description,
        'quantity': hours.quantize(Decimal('0.01')),
        'unit_price': entry.hourly_rate or 0,
    }


@transaction.atomic
def create_invoice_from_time_entries(
    *,
    owner: User,
    client_id: UUID,
    entry_ids: list,
    project_id: Optional[UUID] = None,
    tax_rate: Decimal = Decimal('0'),
    due_date: Optional[date] = None,
    notes: str = ''
) -> Invoice:
    """
    Bill selected completed, billable, uninvoiced time entries. The entries
    are locked against the new invoice.

    Raises:
        TimeEntriesNotBillableError: If any entry is missing, running,
            non-billable, already invoiced or for another client
    """
    entries = list(
        TimeEntry.objects
        .select_for_update()
        .select_related('project')
        .filter(id__in=entry_ids, owner=owner)
        .order_by('start_time')
    )
    if not entries or len(entries) != len(set(str(i) for i in entry_ids)):
        raise TimeEntriesNotBillableError("Some time entries were not found")

    for entry in entries:
        if entry.end_time is None:
            raise TimeEntriesNotBillableError("Cannot invoice a running timer")
        if not entry.billable:
            raise TimeEntriesNotBillableError("Cannot invoice non-billable time")
        if entry.invoice_id is not None:
            raise TimeEntriesNotBillableError("Some time entries are already invoiced")
        if entry.project is None or str(entry.project.client_id) != str(client_id):
            raise TimeEntriesNotBillableError("Time entries must belong to the invoiced client")

    invoice = create_invoice(
        owner=owner,
        client_id=client_id,
        project_id=project_id,
        line_items=[time_entry_line_item(entry) for entry in entries],
        tax_rate=tax_rate,
        due_date=due_date or timezone.localdate() + timedelta(days=DEFAULT_DUE_DAYS),
        notes=notes,
    )

    mark_as_invoiced(owner=owner, entry_ids=[e.id for e in entries], invoice=invoice)
    return invoice


# =============================================================================
# Editing
# =============================================================================

@transaction.atomic
def update_invoice(*, owner: User, invoice_id: UUID, **changes) -> Invoice:
    """
    Edit an unpaid invoice. Totals are recalculated whenever line items or
    the tax rate change.

    Raises:
        InvoiceNotEditableError: If the invoice is paid, partially paid or
            cancelled, or if amounts change after a payment was recorded
    """
    invoice = _lock_invoice(owner, invoice_id)
    if invoice.status not in EDITABLE_STATUSES:
        raise InvoiceNotEditableError(
            f"Cannot edit an invoice that is {invoice.get_status_display().lower()}"
        )
    if ('line_items' in changes or 'tax_rate' in changes) and invoice.paid_amount > 0:
        raise InvoiceNotEditableError("Cannot change the amounts of an invoice with recorded payments")

    update_fields = []
    for field in ('due_date', 'notes', 'allow_partial_payments', 'minimum_payment', 'currency'):
        if field in changes:
            setattr(invoice, field, changes[field])
            update_fields.append(field)

    if 'line_items' in changes or 'tax_rate' in changes:
        if 'line_items' in changes:
            invoice.line_items = build_line_items(changes['line_items'])
        if 'tax_rate' in changes:
            invoice.tax_rate = changes['tax_rate']
        totals = calculate_totals(invoice.line_items, invoice.tax_rate)
        for field, value in totals.items():
            setattr(invoice, field, value)
        update_fields += ['line_items', 'tax_rate', 'subtotal', 'tax', 'total']

    _validate_minimum_payment(invoice.minimum_payment, invoice.total)

    if update_fields:
        invoice.save(update_fields=update_fields + ['updated_at'])
    return invoice


def _release_billed_work(invoice: Invoice) -> None:
    if invoice.milestone and invoice.milestone.status == MilestoneStatus.INVOICED:
        reset_milestone_to_completed(invoice.milestone)
    unlock_invoiced_entries(invoice=invoice)


@transaction.atomic
def delete_invoice(*, owner: User, invoice_id: UUID) -> None:
    """
    Delete an invoice that has no payments. The milestone it billed goes back
    to completed and its time entries are unlocked.
    """
    invoice = _lock_invoice(owner, invoice_id)
    if invoice.payments.exists() or invoice.paid_amount > 0:
        raise InvoiceHasPaymentsError("Cannot delete an invoice with recorded payments")

    _release_billed_work(invoice)
    invoice.delete()


@transaction.atomic
def cancel_invoice(*, owner: User, invoice_id: UUID) -> Invoice:
    invoice = _lock_invoice(owner, invoice_id)
    if invoice.status == InvoiceStatus.CANCELLED:
        raise InvalidInvoiceStateError("Invoice is already cancelled")
    if invoice.payments.exists() or invoice.paid_amount > 0:
        raise InvoiceHasPaymentsError("Cannot cancel an invoice with recorded payments")

    invoice.status = InvoiceStatus.CANCELLED
    invoice.save(update_fields=['status', 'updated_at'])
    _release_billed_work(invoice)
    return invoice


# =============================================================================
# Delivery
# =============================================================================

def send_invoice(*, owner: User, invoice_id: UUID) -> tuple:
    """
    Mark the invoice sent and email the pay link to the client.

    Returns:
        (invoice, email_sent)
    """
    with transaction.atomic():
        invoice = _lock_invoice(owner, invoice_id)
        if invoice.status not in SENDABLE_STATUSES:
            raise InvalidInvoiceStateError(
                f"Cannot send an invoice that is {invoice.get_status_display().lower()}"
            )
        if not invoice.line_items:
            raise InvalidLineItemsError("An invoice needs at least one line item")

        invoice.status = derive_payment_status(invoice.total, invoice.paid_amount, InvoiceStatus.SENT)
        if invoice.sent_at is None:
            invoice.sent_at = timezone.now()
        invoice.save(update_fields=['status', 'sent_at', 'updated_at'])

    email_sent = emails.send_invoice_email(invoice)
    logger.info("Invoice %s sent (email delivered: %s)", invoice.invoice_number, email_sent)
    return invoice, email_sent


def send_payment_reminder(*, owner: User, invoice_id: UUID) -> tuple:
    """
    Email the client about the remaining balance.

    Returns:
        (invoice, email_sent)
    """
    with transaction.atomic():
        invoice = _lock_invoice(owner, invoice_id)
        if invoice.status not in REMINDABLE_STATUSES:
            raise InvalidInvoiceStateError("Reminders can only be sent for unpaid, sent invoices")

        invoice.last_reminder_at = timezone.now()
        invoice.save(update_fields=['last_reminder_at', 'updated_at'])

    email_sent = emails.send_payment_reminder_email(invoice)
    if email_sent:
        notify_payment_reminder_sent(invoice=invoice)
    return invoice, email_sent


def mark_overdue_invoices(*, today: Optional[date] = None) -> int:
    """
    Flag unpaid invoices past their due date as overdue and notify owners.

    Returns:
        Number of invoices that became overdue
    """
    today = today or timezone.localdate()
    count = 0

    candidates = (
        Invoice.objects
        .filter(status__in=OVERDUE_CANDIDATES, due_date__lt=today)
        .select_related('owner', 'client')
    )
    for invoice in candidates:
        with transaction.atomic():
            updated = Invoice.objects.filter(
                id=invoice.id,
                status__in=OVERDUE_CANDIDATES,
            ).update(status=InvoiceStatus.OVERDUE, updated_at=timezone.now())
            if not updated:
                continue
            invoice.status = InvoiceStatus.OVERDUE
            notify_invoice_overdue(invoice=invoice)
        count += 1
        logger.info("Invoice %s is overdue", invoice.invoice_number)

    return count
