"""
Invoices app services layer.

Services contain business logic and orchestrate operations across models.
All money movement goes through ``apply_payment``.
"""

from .exceptions import (
    InvoicesServiceError,
    InvoiceNotFoundError,
    InvalidLineItemsError,
    InvoiceNotEditableError,
    InvoiceHasPaymentsError,
    InvalidInvoiceStateError,
    MilestoneAlreadyBilledError,
    TimeEntriesNotBillableError,
    InvoiceAlreadyPaidError,
    DuplicatePaymentError,
    InvalidPaymentAmountError,
)

from .calculations import (
    build_line_items,
    calculate_totals,
    derive_payment_status,
)

from .numbering import (
    format_invoice_number,
    next_invoice_number,
)

from .invoice_management import (
    list_invoices,
    get_invoice,
    create_invoice,
    create_invoice_from_milestone,
    create_invoice_from_time_entries,
    time_entry_line_item,
    update_invoice,
    delete_invoice,
    cancel_invoice,
    send_invoice,
    send_payment_reminder,
    mark_overdue_invoices,
)

from .payment_application import (
    apply_payment,
    announce_payment,
    mark_paid,
    list_payments,
)

from .public_invoices import (
    get_invoice_by_token,
    record_invoice_view,
    get_public_invoice,
)


__all__ = [
    # Exceptions
    'InvoicesServiceError',
    'InvoiceNotFoundError',
    'InvalidLineItemsError',
    'InvoiceNotEditableError',
    'InvoiceHasPaymentsError',
    'InvalidInvoiceStateError',
    'MilestoneAlreadyBilledError',
    'TimeEntriesNotBillableError',
    'InvoiceAlreadyPaidError',
    'DuplicatePaymentError',
    'InvalidPaymentAmountError',

    # Calculations
    'build_line_items',
    'calculate_totals',
    'derive_payment_status',
    'format_invoice_number',
    'next_invoice_number',

    # Invoice Management
    'list_invoices',
    'get_invoice',
    'create_invoice',
    'create_invoice_from_milestone',
    'create_invoice_from_time_entries',
    'time_entry_line_item',
    'update_invoice',
    'delete_invoice',
    'cancel_invoice',
    'send_invoice',
    'send_payment_reminder',
    'mark_overdue_invoices',

    # Payments
    'apply_payment',
    'announce_payment',
    'mark_paid',
    'list_payments',

    # Public
    'get_invoice_by_token',
    'record_invoice_view',
    'get_public_invoice',
]
