"""
Domain-specific exceptions for clients app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ClientsServiceError(Exception):
    """Base exception for all clients service errors."""
    pass


class ClientNotFoundError(ClientsServiceError):
    """Raised when a client does not exist or belongs to another user."""
    pass


class ClientHasDependentsError(ClientsServiceError):
    """Raised when deleting a client that still has projects or invoices."""
    pass


class ClientNoteNotFoundError(ClientsServiceError):
    """Raised when a note does not exist on the client."""
    pass


class InvalidFollowUpError(ClientsServiceError):
    """Raised when a follow-up date is in the past or missing."""
    pass
