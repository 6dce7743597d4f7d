"""
Timetracking app services layer.

Services contain business logic and orchestrate operations across models.
Billed entries are locked; edits to unlocked entries are audited.
"""

from .exceptions import (
    TimeTrackingServiceError,
    TimeEntryNotFoundError,
    TimeEntryProjectNotFoundError,
    TimerAlreadyRunningError,
    TimerNotRunningError,
    TimeEntryLockedError,
    InvalidTimeEntryError,
    OverlappingEntryError,
    InvalidSettingsError,
)

from .durations import (
    calculate_duration,
    format_duration,
    round_to_nearest,
)

from .tracking_settings import (
    get_settings,
    update_settings,
)

from .timers import (
    get_running_timer,
    start_timer,
    stop_timer,
    discard_timer,
    auto_stop_timers,
)

from .entries import (
    create_manual_entry,
    list_entries,
    summarize_entries,
    get_entry,
    update_entry,
    delete_entry,
)

from .reports import (
    get_weekly_timesheet,
    get_stats,
)

from .invoicing import (
    get_uninvoiced_time,
    mark_as_invoiced,
    unlock_invoiced_entries,
)

from .public_logs import (
    get_public_time_logs,
)


__all__ = [
    # Exceptions
    'TimeTrackingServiceError',
    'TimeEntryNotFoundError',
    'TimeEntryProjectNotFoundError',
    'TimerAlreadyRunningError',
    'TimerNotRunningError',
    'TimeEntryLockedError',
    'InvalidTimeEntryError',
    'OverlappingEntryError',
    'InvalidSettingsError',

    # Durations
    'calculate_duration',
    'format_duration',
    'round_to_nearest',

    # Settings
    'get_settings',
    'update_settings',

    # Timers
    'get_running_timer',
    'start_timer',
    'stop_timer',
    'discard_timer',
    'auto_stop_timers',

    # Entries
    'create_manual_entry',
    'list_entries',
    'summarize_entries',
    'get_entry',
    'update_entry',
    'delete_entry',

    # Reports
    'get_weekly_timesheet',
    'get_stats',

    # Invoicing
    'get_uninvoiced_time',
    'mark_as_invoiced',
    'unlock_invoiced_entries',

    # Client portal
    'get_public_time_logs',
]
