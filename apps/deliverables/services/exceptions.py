"""
Custom exceptions for deliverables services.
"""


class DeliverablesServiceError(Exception):
    """Base exception for deliverables service errors."""
    pass


class DeliverableNotFoundError(DeliverablesServiceError):
    """Raised when a deliverable does not exist for the user."""
    pass


class FileTooLargeError(DeliverablesServiceError):
    """Raised when an upload exceeds the size limit."""
    pass


class InvalidGithubUrlError(DeliverablesServiceError):
    """Raised when a repository link is not a github.com URL."""
    pass
