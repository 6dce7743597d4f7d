"""
Notifications app services layer.

In-app notifications are written by the services of other apps through the
typed creators; the dashboard reads them through the management functions.
Outgoing email lives in ``apps.notifications.emails``.
"""

from .exceptions import (
    NotificationsServiceError,
    NotificationNotFoundError,
)

from .notification_management import (
    list_notifications,
    get_unread_count,
    get_recent,
    mark_as_read,
    mark_all_as_read,
    delete_notification,
    delete_all_read,
)

from .notification_creators import (
    create_notification,
    notify_invoice_paid,
    notify_invoice_partially_paid,
    notify_invoice_viewed,
    notify_invoice_overdue,
    notify_payment_reminder_sent,
    notify_payment_failed,
    notify_contract_signed,
    notify_contract_declined,
    notify_contract_viewed,
    notify_contract_reminder_sent,
    notify_milestone_due_soon,
    notify_milestone_overdue,
    notify_new_client,
    notify_welcome,
    notify_stripe_connected,
)


__all__ = [
    # Exceptions
    'NotificationsServiceError',
    'NotificationNotFoundError',

    # Management
    'list_notifications',
    'get_unread_count',
    'get_recent',
    'mark_as_read',
    'mark_all_as_read',
    'delete_notification',
    'delete_all_read',

    # Creators
    'create_notification',
    'notify_invoice_paid',
    'notify_invoice_partially_paid',
    'notify_invoice_viewed',
    'notify_invoice_overdue',
    'notify_payment_reminder_sent',
    'notify_payment_failed',
    'notify_contract_signed',
    'notify_contract_declined',
    'notify_contract_viewed',
    'notify_contract_reminder_sent',
    'notify_milestone_due_soon',
    'notify_milestone_overdue',
    'notify_new_client',
    'notify_welcome',
    'notify_stripe_connected',
]
