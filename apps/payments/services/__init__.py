"""
Payments app services layer.

Stripe Connect onboarding, checkout sessions for the public payment page,
and webhook processing. Invoice money movement itself lives in
``apps.invoices.services.apply_payment``.
"""

from .exceptions import (
    PaymentsServiceError,
    StripeNotConnectedError,
    InvoiceNotPayableError,
    InvalidCheckoutAmountError,
    WebhookSignatureError,
)

from .connect import (
    get_connect_status,
    get_onboarding_link,
    get_dashboard_link,
    get_balance,
    disconnect,
    create_refund,
)

from .checkout import (
    resolve_checkout_amount,
    platform_fee,
    create_checkout_session,
)

from .webhooks import (
    process_webhook,
    credit_invoice,
)


__all__ = [
    # Exceptions
    'PaymentsServiceError',
    'StripeNotConnectedError',
    'InvoiceNotPayableError',
    'InvalidCheckoutAmountError',
    'WebhookSignatureError',

    # Connect
    'get_connect_status',
    'get_onboarding_link',
    'get_dashboard_link',
    'get_balance',
    'disconnect',
    'create_refund',

    # Checkout
    'resolve_checkout_amount',
    'platform_fee',
    'create_checkout_session',

    # Webhooks
    'process_webhook',
    'credit_invoice',
]
