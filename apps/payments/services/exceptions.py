"""
Domain-specific exceptions for payments app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class PaymentsServiceError(Exception):
    """Base exception for all payments service errors."""
    pass


class StripeNotConnectedError(PaymentsServiceError):
    """Raised when an action needs a Stripe account the user has not connected."""
    pass


class InvoiceNotPayableError(PaymentsServiceError):
    """Raised when a checkout is requested for a paid or cancelled invoice."""
    pass


class InvalidCheckoutAmountError(PaymentsServiceError):
    """Raised when a custom checkout amount breaks the invoice's payment terms."""
    pass


class WebhookSignatureError(PaymentsServiceError):
    """Raised when a webhook is unsigned or its signature does not verify."""
    pass
