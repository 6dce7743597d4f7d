from datetime import timedelta

import pytest
from django.utils import timezone

from apps.notifications.models import Notification, NotificationType


@pytest.fixture
def notifications(user):
    """Three notifications for the test user, newest first; the oldest is read."""
    now = timezone.now()
    created = []
    for minutes, (type, title, read) in enumerate([
        (NotificationType.INVOICE_PAID, 'Payment received', False),
        (NotificationType.CONTRACT_SIGNED, 'Contract signed', False),
        (NotificationType.WELCOME, 'Welcome to Zovo', True),
    ]):
        notification = Notification.objects.create(
            user=user,
            type=type,
            title=title,
            message=title,
            read=read,
            read_at=now if read else None,
        )
        Notification.objects.filter(id=notification.id).update(created_at=now - timedelta(minutes=minutes))
        created.append(notification)
    return created


@pytest.fixture
def foreign_notification(other_user):
    return Notification.objects.create(
        user=other_user,
        type=NotificationType.NEW_CLIENT,
        title='New client added',
        message='Globex was added to your clients',
    )
