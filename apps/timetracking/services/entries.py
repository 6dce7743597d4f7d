"""
Manual entries, listing and the audited edit path.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet, Sum, Count, Case, When, F, BigIntegerField
from django.utils import timezone

from apps.accounts.models import User
from apps.common.money import round_cents
from apps.timetracking.models import TimeEntry, EntryType

from .durations import format_duration
from .exceptions import (
    TimeEntryNotFoundError,
    TimeEntryLockedError,
    InvalidTimeEntryError,
    OverlappingEntryError,
)
from .timers import resolve_work_target
from .tracking_settings import get_settings

MANUAL_START = time(9, 0)


def day_bounds(day: date) -> tuple:
    """Aware [start, end) datetimes of a local calendar day."""
    start = timezone.make_aware(datetime.combine(day, time.min))
    return start, start + timedelta(days=1)


def _find_overlap(owner: User, start: datetime, end: datetime, exclude_id=None) -> Optional[TimeEntry]:
    queryset = TimeEntry.objects.filter(
        owner=owner,
        end_time__isnull=False,
        start_time__lt=end,
        end_time__gt=start,
    )
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    return queryset.first()


@transaction.atomic
def create_manual_entry(
    *,
    owner: User,
    description: str,
    entry_date: date,
    duration: int,
    project_id: Optional[UUID] = None,
    milestone_id: Optional[UUID] = None,
    billable: bool = True,
    hourly_rate: Optional[int] = None
) -> tuple:
    """
    Log time after the fact. The entry starts at 09:00 on ``entry_date`` and is
    marked manual.

    Returns:
        (entry, warning) where warning is None unless the day total now
        exceeds the daily hour warning

    Raises:
        InvalidTimeEntryError: Missing description, date outside the
            retroactive window or in the future, duration under a minute
        OverlappingEntryError: If the entry overlaps existing time and
            overlapping is not allowed
    """
    if not (description or '').strip():
        raise InvalidTimeEntryError("Description is required for manual entries")
    if duration < 60:
        raise InvalidTimeEntryError("Minimum duration is 1 minute")

    settings = get_settings(owner)
    today = timezone.localdate()
    earliest = today - timedelta(days=settings.max_retroactive_days)
    if entry_date < earliest:
        raise InvalidTimeEntryError(
            f"Cannot add entries more than {settings.max_retroactive_days} days in the past. "
            f"Earliest allowed: {earliest.isoformat()}"
        )
    if entry_date > today:
        raise InvalidTimeEntryError("Cannot add time entries for future dates")

    project, milestone = resolve_work_target(owner, project_id, milestone_id)

    start = timezone.make_aware(datetime.combine(entry_date, MANUAL_START))
    end = start + timedelta(seconds=duration)

    if not settings.allow_overlapping and _find_overlap(owner, start, end):
        raise OverlappingEntryError(
            "This time entry overlaps with an existing entry. Check your timesheet."
        )

    day_start, day_end = day_bounds(entry_date)
    logged = (
        TimeEntry.objects
        .filter(owner=owner, start_time__gte=day_start, start_time__lt=day_end)
        .aggregate(total=Sum('duration'))['total'] or 0
    )
    day_total = logged + duration
    warning = None
    if day_total > settings.daily_hour_warning * 60:
        warning = (
            f"Note: This brings your total for {entry_date.isoformat()} to {format_duration(day_total)}, "
            f"which exceeds {format_duration(settings.daily_hour_warning * 60)}."
        )

    entry = TimeEntry.objects.create(
        owner=owner,
        project=project,
        milestone=milestone,
        description=description,
        start_time=start,
        end_time=end,
        duration=duration,
        billable=billable,
        hourly_rate=hourly_rate if hourly_rate is not None else settings.default_hourly_rate,
        entry_type=EntryType.MANUAL,
        original_start_time=start,
        original_end_time=end,
        original_duration=duration,
    )
    return entry, warning


def list_entries(
    *,
    owner: User,
    project_id: Optional[UUID] = None,
    milestone_id: Optional[UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    billable: Optional[bool] = None,
    invoiced: Optional[bool] = None
) -> QuerySet[TimeEntry]:
    queryset = TimeEntry.objects.filter(owner=owner).select_related('project', 'milestone', 'invoice')

    if project_id:
        queryset = queryset.filter(project_id=project_id)
    if milestone_id:
        queryset = queryset.filter(milestone_id=milestone_id)
    if start_date:
        queryset = queryset.filter(start_time__gte=day_bounds(start_date)[0])
    if end_date:
        queryset = queryset.filter(start_time__lt=day_bounds(end_date)[1])
    if billable is not None:
        queryset = queryset.filter(billable=billable)
    if invoiced is True:
        queryset = queryset.filter(invoice__isnull=False)
    elif invoiced is False:
        queryset = queryset.filter(invoice__isnull=True)

    return queryset.order_by('-start_time')


def summarize_entries(queryset: QuerySet[TimeEntry]) -> dict:
    """
    Returns:
        Dict with total/billable seconds, earnings in cents and entry count
    """
    totals = queryset.order_by().aggregate(
        total_duration=Sum('duration'),
        billable_duration=Sum(
            Case(When(billable=True, then=F('duration')), default=0, output_field=BigIntegerField())
        ),
        rate_seconds=Sum(
            Case(
                When(billable=True, hourly_rate__isnull=False, then=F('duration') * F('hourly_rate')),
                default=0,
                output_field=BigIntegerField(),
            )
        ),
        count=Count('id'),
    )
    total = totals['total_duration'] or 0
    billable = totals['billable_duration'] or 0
    return {
        'total_duration': total,
        'billable_duration': billable,
        'total_earnings': round_cents(Decimal(totals['rate_seconds'] or 0) / Decimal(3600)),
        'count': totals['count'],
        'formatted_total': format_duration(total),
        'formatted_billable': format_duration(billable),
    }


def get_entry(*, owner: User, entry_id: UUID) -> TimeEntry:
    try:
        return (
            TimeEntry.objects
            .select_related('project', 'milestone', 'invoice')
            .get(id=entry_id, owner=owner)
        )
    except TimeEntry.DoesNotExist:
        raise TimeEntryNotFoundError("Time entry not found")


def _history_item(field: str, old, new, reason: Optional[str]) -> dict:
    return {
        'edited_at': timezone.now().isoformat(),
        'field': field,
        'old_value': old,
        'new_value': new,
        'reason': reason or None,
    }


@transaction.atomic
def update_entry(
    *,
    owner: User,
    entry_id: UUID,
    edit_reason: Optional[str] = None,
    **changes
) -> TimeEntry:
    """
    Edit a stopped, unlocked entry. Description, duration, billable flag
    and rate changes are appended to the edit history.

    Raises:
        TimeEntryLockedError: If the entry is invoiced
        InvalidTimeEntryError: If the timer is still running
    """
    try:
        entry = TimeEntry.objects.select_for_update().get(id=entry_id, owner=owner)
    except TimeEntry.DoesNotExist:
        raise TimeEntryNotFoundError("Time entry not found")

    if entry.locked_at:
        raise TimeEntryLockedError(
            f"This entry is locked ({entry.locked_reason or 'invoiced'}) and cannot be edited."
        )
    if entry.end_time is None:
        raise InvalidTimeEntryError("Stop the timer before editing")

    history = list(entry.edit_history or [])

    if 'description' in changes and changes['description'] != entry.description:
        history.append(_history_item('description', entry.description, changes['description'], edit_reason))
        entry.description = changes['description']

    if 'duration' in changes and changes['duration'] != entry.duration:
        if changes['duration'] < 60:
            raise InvalidTimeEntryError("Minimum duration is 1 minute")
        history.append(_history_item('duration', entry.duration, changes['duration'], edit_reason))
        entry.duration = changes['duration']
        entry.end_time = entry.start_time + timedelta(seconds=entry.duration)

    if 'billable' in changes and changes['billable'] != entry.billable:
        history.append(_history_item(
            'billable',
            'yes' if entry.billable else 'no',
            'yes' if changes['billable'] else 'no',
            edit_reason
        ))
        entry.billable = changes['billable']

    if 'hourly_rate' in changes and changes['hourly_rate'] != entry.hourly_rate:
        history.append(_history_item('hourly_rate', entry.hourly_rate, changes['hourly_rate'], edit_reason))
        entry.hourly_rate = changes['hourly_rate']

    if 'project_id' in changes or 'milestone_id' in changes:
        project, milestone = resolve_work_target(
            owner,
            changes.get('project_id', entry.project_id),
            changes.get('milestone_id', entry.milestone_id if 'project_id' not in changes else None),
        )
        entry.project = project
        entry.milestone = milestone

    entry.edit_history = history
    entry.save()
    return entry


@transaction.atomic
def delete_entry(*, owner: User, entry_id: UUID) -> None:
    try:
        entry = TimeEntry.objects.select_for_update().get(id=entry_id, owner=owner)
    except TimeEntry.DoesNotExist:
        raise TimeEntryNotFoundError("Time entry not found")

    if entry.locked_at:
        raise TimeEntryLockedError("Cannot delete locked/invoiced time entries")
    entry.delete()
