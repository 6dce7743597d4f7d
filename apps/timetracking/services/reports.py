from datetime import date, timedelta

from django.db.models import Count, Q
from django.utils import timezone

from apps.accounts.models import User
from apps.timetracking.models import TimeEntry, EntryType

from .durations import format_duration
from .entries import day_bounds, summarize_entries


def get_weekly_timesheet(*, owner: User, week_start: date) -> dict:
    """
    Seven days of entries starting at ``week_start``, grouped per local day.
    Each day carries its entries (model instances) and totals.
    """
    range_start = day_bounds(week_start)[0]
    range_end = day_bounds(week_start + timedelta(days=6))[1]

    entries = list(
        TimeEntry.objects
        .filter(owner=owner, start_time__gte=range_start, start_time__lt=range_end)
        .select_related('project')
        .order_by('start_time')
    )

    days = {}
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        days[day] = {'date': day, 'entries': [], 'total_seconds': 0, 'billable_seconds': 0}

    for entry in entries:
        day = days.get(timezone.localdate(entry.start_time))
        if day is None:
            continue
        day['entries'].append(entry)
        day['total_seconds'] += entry.duration or 0
        if entry.billable:
            day['billable_seconds'] += entry.duration or 0

    for day in days.values():
        day['formatted_total'] = format_duration(day['total_seconds'])
        day['formatted_billable'] = format_duration(day['billable_seconds'])

    total = sum(e.duration or 0 for e in entries)
    billable = sum(e.duration or 0 for e in entries if e.billable)
    return {
        'week_start': week_start,
        'days': list(days.values()),
        'totals': {
            'total_seconds': total,
            'billable_seconds': billable,
            'entry_count': len(entries),
            'manual_count': sum(1 for e in entries if e.entry_type == EntryType.MANUAL),
            'formatted_total': format_duration(total),
            'formatted_billable': format_duration(billable),
        },
    }


def get_stats(*, owner: User, start_date: date, end_date: date) -> dict:
    queryset = TimeEntry.objects.filter(
        owner=owner,
        start_time__gte=day_bounds(start_date)[0],
        start_time__lt=day_bounds(end_date)[1],
    )
    summary = summarize_entries(queryset)
    counts = queryset.order_by().aggregate(
        project_count=Count('project', distinct=True),
        tracked_count=Count('id', filter=Q(entry_type=EntryType.TRACKED)),
        manual_count=Count('id', filter=Q(entry_type=EntryType.MANUAL)),
    )

    return {
        'total_duration': summary['total_duration'],
        'billable_duration': summary['billable_duration'],
        'total_earnings': summary['total_earnings'],
        'entry_count': summary['count'],
        'project_count': counts['project_count'],
        'tracked_count': counts['tracked_count'],
        'manual_count': counts['manual_count'],
        'formatted_total': summary['formatted_total'],
        'formatted_billable': summary['formatted_billable'],
    }
