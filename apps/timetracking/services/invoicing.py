"""
Hand-off between tracked time and invoices.

Invoiced entries are locked so billed time cannot change afterwards.
"""

from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.timetracking.models import TimeEntry

from .entries import summarize_entries
from .exceptions import InvalidTimeEntryError

LOCK_REASON_INVOICED = 'invoiced'


def get_uninvoiced_time(
    *,
    owner: User,
    project_id: Optional[UUID] = None,
    client_id: Optional[UUID] = None
) -> dict:
    """
    Completed, billable, not yet invoiced entries for a project or for all
    projects of a client.

    Returns:
        {'entries': [TimeEntry, ...], 'totals': {...}}
    """
    queryset = TimeEntry.objects.filter(
        owner=owner,
        billable=True,
        invoice__isnull=True,
        end_time__isnull=False,
    ).select_related('project')

    if project_id:
        queryset = queryset.filter(project_id=project_id)
    elif client_id:
        queryset = queryset.filter(project__client_id=client_id, project__owner=owner)

    summary = summarize_entries(queryset)
    return {
        'entries': list(queryset.order_by('-start_time')),
        'totals': {
            'total_seconds': summary['total_duration'],
            'total_earnings': summary['total_earnings'],
            'formatted_total': summary['formatted_total'],
        },
    }


@transaction.atomic
def mark_as_invoiced(*, owner: User, entry_ids: list, invoice) -> int:
    """
    Attach entries to ``invoice`` and lock them.

    Raises:
        InvalidTimeEntryError: If an entry is missing, not owned or already invoiced

    Returns:
        Number of entries locked
    """
    entries = list(TimeEntry.objects.select_for_update().filter(owner=owner, id__in=entry_ids))
    if len(entries) != len(set(str(i) for i in entry_ids)):
        raise InvalidTimeEntryError("Some entries not found or access denied")

    already = [e for e in entries if e.invoice_id]
    if already:
        raise InvalidTimeEntryError(f"{len(already)} entries are already invoiced")

    return TimeEntry.objects.filter(id__in=[e.id for e in entries]).update(
        invoice=invoice,
        locked_at=timezone.now(),
        locked_reason=LOCK_REASON_INVOICED,
        updated_at=timezone.now(),
    )


def unlock_invoiced_entries(*, invoice) -> int:
    """Release the entries billed on an invoice that is being removed."""
    return TimeEntry.objects.filter(invoice=invoice).update(
        invoice=None,
        locked_at=None,
        locked_reason='',
        updated_at=timezone.now(),
    )
