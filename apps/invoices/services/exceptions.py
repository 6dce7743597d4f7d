"""
Domain-specific exceptions for invoices app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class InvoicesServiceError(Exception):
    """Base exception for all invoice service errors."""
    pass


class InvoiceNotFoundError(InvoicesServiceError):
    """Raised when an invoice does not exist or belongs to another user."""
    pass


class InvalidLineItemsError(InvoicesServiceError):
    """Raised when an invoice has no line items or invalid amounts."""
    pass


class InvoiceNotEditableError(InvoicesServiceError):
    """Raised when changing an invoice whose status no longer allows it."""
    pass


class InvoiceHasPaymentsError(InvoicesServiceError):
    """Raised when deleting or cancelling an invoice that has payments."""
    pass


class InvalidInvoiceStateError(InvoicesServiceError):
    """Raised when an action is not allowed in the invoice's current status."""
    pass


class MilestoneAlreadyBilledError(InvoicesServiceError):
    """Raised when invoicing a milestone that is already invoiced or paid."""
    pass


class TimeEntriesNotBillableError(InvoicesServiceError):
    """Raised when selected time entries cannot be invoiced."""
    pass


class InvoiceAlreadyPaidError(InvoicesServiceError):
    """Raised when crediting a payment to an invoice that is fully paid."""
    pass


class DuplicatePaymentError(InvoicesServiceError):
    """Raised when a provider payment id has already been credited."""
    pass


class InvalidPaymentAmountError(InvoicesServiceError):
    """Raised when a payment amount is not positive or exceeds the balance."""
    pass
