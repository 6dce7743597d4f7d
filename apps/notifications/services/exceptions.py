"""Domain-specific exceptions for notifications."""


class NotificationsServiceError(Exception):
    """Base exception for notification services."""
    pass


class NotificationNotFoundError(NotificationsServiceError):
    """Raised when a notification does not exist or belongs to another user."""
    pass
