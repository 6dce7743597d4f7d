from apps.timetracking.models import TimeEntry

from .durations import format_duration
from .tracking_settings import get_settings


def get_public_time_logs(*, project) -> dict:
    """
    Client-visible work log for a project: completed billable entries only,
    and only when the owner allows it.
    """
    if not get_settings(project.owner).client_visible_logs:
        return {'enabled': False, 'entries': []}

    entries = (
        TimeEntry.objects
        .filter(project=project, billable=True, end_time__isnull=False)
        .order_by('-start_time')
    )

    logs = [
        {
            'id': entry.id,
            'date': entry.start_time,
            'description': entry.description,
            'duration': entry.duration,
            'formatted_duration': format_duration(entry.duration or 0),
            'entry_type': entry.entry_type,
        }
        for entry in entries
    ]
    total = sum(log['duration'] or 0 for log in logs)

    return {
        'enabled': True,
        'entries': logs,
        'total_seconds': total,
        'formatted_total': format_duration(total),
    }
