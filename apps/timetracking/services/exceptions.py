"""
Custom exceptions for timetracking services.
"""


class TimeTrackingServiceError(Exception):
    """Base exception for timetracking service errors."""
    pass


class TimeEntryNotFoundError(TimeTrackingServiceError):
    """Raised when a time entry does not exist for the user."""
    pass


class TimeEntryProjectNotFoundError(TimeTrackingServiceError):
    """Raised when the project or milestone of an entry is not the user's."""
    pass


class TimerAlreadyRunningError(TimeTrackingServiceError):
    """Raised when starting a timer while another one is running."""
    pass


class TimerNotRunningError(TimeTrackingServiceError):
    """Raised when stopping or discarding an entry that is already stopped."""
    pass


class TimeEntryLockedError(TimeTrackingServiceError):
    """Raised when editing or deleting an invoiced entry."""
    pass


class InvalidTimeEntryError(TimeTrackingServiceError):
    """Raised when entry data breaks the user's time tracking rules."""
    pass


class OverlappingEntryError(InvalidTimeEntryError):
    """Raised when a manual entry overlaps existing time."""
    pass


class InvalidSettingsError(TimeTrackingServiceError):
    """Raised when a settings value is out of bounds."""
    pass
