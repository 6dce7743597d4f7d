from datetime import date

import pytest

from apps.notifications.models import Notification, NotificationType
from apps.notifications.services import (
    list_notifications,
    get_unread_count,
    get_recent,
    mark_as_read,
    mark_all_as_read,
    delete_notification,
    delete_all_read,
    notify_invoice_paid,
    notify_invoice_partially_paid,
    notify_invoice_overdue,
    notify_payment_failed,
    notify_milestone_due_soon,
    notify_new_client,
    NotificationNotFoundError,
)


# =============================================================================
# READING AND HOUSEKEEPING
# =============================================================================

@pytest.mark.django_db
class TestListNotifications:

    def test_newest_first(self, user, notifications, foreign_notification):
        result = list_notifications(user=user)

        assert [n.title for n in result['notifications']] == [
            'Payment received', 'Contract signed', 'Welcome to Zovo',
        ]
        assert result['total'] == 3
        assert result['unread_count'] == 2

    def test_unread_only(self, user, notifications):
        result = list_notifications(user=user, unread_only=True)

        assert result['total'] == 2
        assert all(not n.read for n in result['notifications'])

    def test_offset_and_limit(self, user, notifications):
        result = list_notifications(user=user, limit=1, offset=1)

        assert [n.title for n in result['notifications']] == ['Contract signed']
        assert result['total'] == 3

    def test_limit_clamped(self, user, notifications):
        assert len(list_notifications(user=user, limit=0)['notifications']) == 1
        assert len(get_recent(user=user, limit=500)) == 3


@pytest.mark.django_db
class TestReadState:

    def test_unread_count(self, user, notifications, foreign_notification):
        assert get_unread_count(user=user) == 2

    def test_mark_as_read(self, user, notifications):
        notification = mark_as_read(user=user, notification_id=notifications[0].id)

        assert notification.read is True
        assert notification.read_at is not None
        assert get_unread_count(user=user) == 1

    def test_mark_other_users_notification(self, user, foreign_notification):
        with pytest.raises(NotificationNotFoundError):
            mark_as_read(user=user, notification_id=foreign_notification.id)

    def test_mark_all(self, user, notifications, foreign_notification):
        assert mark_all_as_read(user=user) == 2
        assert get_unread_count(user=user) == 0

        foreign_notification.refresh_from_db()
        assert foreign_notification.read is False


@pytest.mark.django_db
class TestDelete:

    def test_delete_one(self, user, notifications):
        delete_notification(user=user, notification_id=notifications[1].id)

        assert Notification.objects.filter(user=user).count() == 2

    def test_delete_other_users(self, user, foreign_notification):
        with pytest.raises(NotificationNotFoundError):
            delete_notification(user=user, notification_id=foreign_notification.id)

    def test_delete_all_read(self, user, notifications):
        assert delete_all_read(user=user) == 1
        assert not Notification.objects.filter(user=user, read=True).exists()


# =============================================================================
# CREATORS
# =============================================================================

@pytest.mark.django_db
class TestCreators:

    def test_invoice_paid(self, invoice, user):
        notification = notify_invoice_paid(invoice=invoice, amount=150000)

        assert notification.user == user
        assert notification.type == NotificationType.INVOICE_PAID
        assert notification.message == 'Acme Corp paid invoice INV-0001 ($1,500.00)'
        assert notification.resource_type == 'invoice'
        assert notification.resource_id == invoice.id
        assert notification.metadata == {'amount': 150000, 'invoice_number': 'INV-0001'}

    def test_invoice_partially_paid(self, invoice):
        invoice.paid_amount = 50000

        notification = notify_invoice_partially_paid(invoice=invoice, amount=50000)

        assert notification.message == 'Acme Corp paid $500.00 on invoice INV-0001. $1,000.00 remaining.'
        assert notification.metadata['remaining'] == 100000

    def test_invoice_overdue(self, invoice):
        notification = notify_invoice_overdue(invoice=invoice)

        assert notification.message == 'Invoice INV-0001 for Acme Corp is overdue ($1,500.00 outstanding)'

    def test_payment_failed_reason(self, invoice):
        notification = notify_payment_failed(invoice=invoice, reason='Card declined')

        assert notification.message == 'A payment attempt for invoice INV-0001 failed: Card declined'

    def test_milestone_due_soon(self, milestone, user):
        milestone.due_date = date(2030, 6, 4)

        notification = notify_milestone_due_soon(milestone=milestone)

        assert notification.user == user
        assert notification.message == '"Design" on Website Redesign is due Jun 04'
        assert notification.resource_type == 'milestone'

    def test_new_client(self, client_record):
        notification = notify_new_client(client=client_record)

        assert notification.message == 'Acme Corp was added to your clients'
        assert notification.resource_id == client_record.id
