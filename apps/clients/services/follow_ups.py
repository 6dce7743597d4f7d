"""Follow-up reminders on clients."""

from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.clients.models import Client

from .client_management import get_client
from .exceptions import InvalidFollowUpError


def set_follow_up(
    *,
    owner: User,
    client_id: UUID,
    follow_up_date: date,
    note: str = ''
) -> Client:
    """
    Raises:
        InvalidFollowUpError: If the date is in the past
    """
    if follow_up_date < timezone.localdate():
        raise InvalidFollowUpError("Follow-up date cannot be in the past")

    client = get_client(owner=owner, client_id=client_id)
    client.follow_up_date = follow_up_date
    client.follow_up_note = note or ''
    client.save(update_fields=['follow_up_date', 'follow_up_note', 'updated_at'])
    return client


def complete_follow_up(*, owner: User, client_id: UUID) -> Client:
    client = get_client(owner=owner, client_id=client_id)
    client.follow_up_date = None
    client.follow_up_note = ''
    client.save(update_fields=['follow_up_date', 'follow_up_note', 'updated_at'])
    return client


def snooze_follow_up(*, owner: User, client_id: UUID, days: int = 1) -> Client:
    """
    Push the reminder ``days`` forward from whichever is later: today or the
    current follow-up date.
    """
    if days < 1:
        raise InvalidFollowUpError("Snooze must be at least one day")

    client = get_client(owner=owner, client_id=client_id)
    if client.follow_up_date is None:
        raise InvalidFollowUpError("Client has no follow-up to snooze")

    base = max(client.follow_up_date, timezone.localdate())
    client.follow_up_date = base + timedelta(days=days)
    client.save(update_fields=['follow_up_date', 'updated_at'])
    return client


def get_upcoming_follow_ups(*, owner: User, within_days: Optional[int] = None) -> QuerySet[Client]:
    """
    Clients with a pending follow-up, soonest first. Overdue reminders are
    always included; ``within_days`` caps how far ahead to look.
    """
    queryset = Client.objects.filter(owner=owner, follow_up_date__isnull=False)
    if within_days is not None:
        queryset = queryset.filter(
            follow_up_date__lte=timezone.localdate() + timedelta(days=within_days)
        )
    return queryset.order_by('follow_up_date', 'name')
