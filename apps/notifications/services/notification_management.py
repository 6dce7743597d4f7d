"""Reading and housekeeping of a user's notifications."""

from uuid import UUID

from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.notifications.models import Notification

from .exceptions import NotificationNotFoundError

MAX_PAGE_SIZE = 100


def list_notifications(
    *,
    user: User,
    unread_only: bool = False,
    limit: int = 20,
    offset: int = 0
) -> dict:
    """
    Page through a user's notifications, newest first.

    Returns:
        {'notifications': QuerySet slice, 'total': int, 'unread_count': int}
    """
    queryset = Notification.objects.filter(user=user)
    if unread_only:
        queryset = queryset.filter(read=False)

    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)

    return {
        'notifications': queryset.order_by('-created_at')[offset:offset + limit],
        'total': queryset.count(),
        'unread_count': get_unread_count(user=user),
    }


def get_unread_count(*, user: User) -> int:
    return Notification.objects.filter(user=user, read=False).count()


def get_recent(*, user: User, limit: int = 5) -> QuerySet[Notification]:
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    return Notification.objects.filter(user=user).order_by('-created_at')[:limit]


def _get_owned(user: User, notification_id: UUID) -> Notification:
    try:
        return Notification.objects.get(id=notification_id, user=user)
    except Notification.DoesNotExist:
        raise NotificationNotFoundError("Notification not found")


def mark_as_read(*, user: User, notification_id: UUID) -> Notification:
    notification = _get_owned(user, notification_id)
    notification.mark_read()
    return notification


def mark_all_as_read(*, user: User) -> int:
    """Returns the number of notifications that changed."""
    return Notification.objects.filter(user=user, read=False).update(
        read=True,
        read_at=timezone.now()
    )


def delete_notification(*, user: User, notification_id: UUID) -> None:
    _get_owned(user, notification_id).delete()


def delete_all_read(*, user: User) -> int:
    deleted, _ = Notification.objects.filter(user=user, read=True).delete()
    return deleted
