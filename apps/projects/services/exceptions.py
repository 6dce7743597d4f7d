"""
Domain-specific exceptions for projects app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ProjectsServiceError(Exception):
    """Base exception for all projects service errors."""
    pass


class ProjectNotFoundError(ProjectsServiceError):
    """Raised when a project does not exist or belongs to another user."""
    pass


class MilestoneNotFoundError(ProjectsServiceError):
    """Raised when a milestone does not exist on an owned project."""
    pass


class MilestoneLockedError(ProjectsServiceError):
    """Raised when changing a milestone that has been invoiced or paid."""
    pass


class PortalPasswordError(ProjectsServiceError):
    """Raised when the client portal password is missing or wrong."""
    pass
