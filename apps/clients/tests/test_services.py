"""
Service layer unit tests for clients app.

Tests cover:
- Ownership scoping
- Deletion guards
- Follow-up reminders
- Payment behavior rating
"""

import pytest
from datetime import timedelta
from uuid import uuid4
from django.utils import timezone

from apps.clients.models import Client, ClientNote, ClientStatus
from apps.clients.services import (
    list_clients,
    get_client,
    create_client,
    update_client,
    delete_client,
    get_status_counts,
    activate_lead,
    list_notes,
    add_note,
    delete_note,
    set_follow_up,
    complete_follow_up,
    snooze_follow_up,
    get_upcoming_follow_ups,
    calculate_payment_behavior,
    rate_average_days,
)
from apps.clients.services.exceptions import (
    ClientNotFoundError,
    ClientHasDependentsError,
    ClientNoteNotFoundError,
    InvalidFollowUpError,
)
from apps.notifications.models import Notification, NotificationType


# =============================================================================
# Client Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestClientManagement:
    """Tests for client_management.py service functions."""

    def test_create_client_defaults_to_lead(self, user):
        client = create_client(owner=user, name='Hooli', email='gavin@hooli.example.com', company='Hooli')

        assert client.status == ClientStatus.LEAD
        assert client.owner == user
        assert client.company == 'Hooli'

    def test_create_client_notifies_owner(self, user):
        client = create_client(owner=user, name='Hooli', email='gavin@hooli.example.com')

        notification = Notification.objects.get(user=user, type=NotificationType.NEW_CLIENT)
        assert notification.resource_id == client.id

    def test_create_client_ignores_unknown_fields(self, user):
        client = create_client(owner=user, name='Hooli', email='g@hooli.example.com', owner_id=uuid4())
        assert client.owner == user

    def test_get_client_of_other_owner(self, other_user, client_record):
        with pytest.raises(ClientNotFoundError):
            get_client(owner=other_user, client_id=client_record.id)

    def test_list_clients_filters(self, user, client_record, lead, other_client_record):
        assert set(list_clients(owner=user)) == {client_record, lead}
        assert list(list_clients(owner=user, status=ClientStatus.LEAD)) == [lead]
        assert list(list_clients(owner=user, search='acme')) == [client_record]
        assert list(list_clients(owner=user, search='initech.example')) == [lead]

    def test_list_clients_counts_projects(self, user, project, client_record):
        row = list_clients(owner=user).get(id=client_record.id)
        assert row.project_count == 1

    def test_update_client(self, user, client_record):
        client = update_client(
            owner=user,
            client_id=client_record.id,
            phone='555-0100',
            status=ClientStatus.INACTIVE,
            name=None,
        )

        assert client.phone == '555-0100'
        assert client.status == ClientStatus.INACTIVE
        assert client.name == 'Acme Corp'

    def test_update_client_of_other_owner(self, other_user, client_record):
        with pytest.raises(ClientNotFoundError):
            update_client(owner=other_user, client_id=client_record.id, name='Stolen')

    def test_delete_client(self, user, lead):
        delete_client(owner=user, client_id=lead.id)
        assert not Client.objects.filter(id=lead.id).exists()

    def test_delete_client_with_projects(self, user, client_record, project):
        with pytest.raises(ClientHasDependentsError) as exc:
            delete_client(owner=user, client_id=client_record.id)

        assert 'projects' in str(exc.value)
        assert Client.objects.filter(id=client_record.id).exists()

    def test_delete_client_with_invoices(self, user, lead, paid_invoice_factory):
        paid_invoice_factory(lead, days=3, number=1)

        with pytest.raises(ClientHasDependentsError) as exc:
            delete_client(owner=user, client_id=lead.id)
        assert str(exc.value) == 'Cannot delete a client with invoices.'

    def test_status_counts(self, user, client_record, lead, inactive_client, other_client_record):
        assert get_status_counts(owner=user) == {'all': 3, 'lead': 1, 'active': 1, 'inactive': 1}

    def test_status_counts_empty(self, user):
        assert get_status_counts(owner=user) == {'all': 0, 'lead': 0, 'active': 0, 'inactive': 0}

    def test_activate_lead(self, lead, client_record):
        assert activate_lead(lead) is True
        lead.refresh_from_db()
        assert lead.status == ClientStatus.ACTIVE

        # Already active clients are left alone
        assert activate_lead(client_record) is False

    def test_activate_lead_leaves_inactive(self, inactive_client):
        assert activate_lead(inactive_client) is False
        inactive_client.refresh_from_db()
        assert inactive_client.status == ClientStatus.INACTIVE


# =============================================================================
# Notes
# =============================================================================

@pytest.mark.django_db
class TestClientNotes:
    """Tests for client notes."""

    def test_add_and_list_notes(self, user, client_record):
        add_note(owner=user, client_id=client_record.id, content='Prefers email')
        add_note(owner=user, client_id=client_record.id, content='Budget approved')

        notes = list_notes(owner=user, client_id=client_record.id)
        assert notes.count() == 2
        assert {n.content for n in notes} == {'Prefers email', 'Budget approved'}
        assert all(n.author == user for n in notes)

    def test_delete_note(self, user, client_record):
        note = add_note(owner=user, client_id=client_record.id, content='Temp')
        delete_note(owner=user, client_id=client_record.id, note_id=note.id)
        assert not ClientNote.objects.filter(id=note.id).exists()

    def test_delete_note_of_other_client(self, user, client_record, lead):
        note = add_note(owner=user, client_id=lead.id, content='Lead note')

        with pytest.raises(ClientNoteNotFoundError):
            delete_note(owner=user, client_id=client_record.id, note_id=note.id)

    def test_notes_are_owner_scoped(self, other_user, client_record):
        with pytest.raises(ClientNotFoundError):
            add_note(owner=other_user, client_id=client_record.id, content='Hi')


# =============================================================================
# Follow-ups
# =============================================================================

@pytest.mark.django_db
class TestFollowUps:
    """Tests for follow_ups.py."""

    def test_set_follow_up(self, user, client_record):
        when = timezone.localdate() + timedelta(days=3)
        client = set_follow_up(owner=user, client_id=client_record.id, follow_up_date=when, note='Call back')

        assert client.follow_up_date == when
        assert client.follow_up_note == 'Call back'
        assert client.follow_up_overdue is False

    def test_set_follow_up_today_allowed(self, user, client_record):
        today = timezone.localdate()
        client = set_follow_up(owner=user, client_id=client_record.id, follow_up_date=today)
        assert client.follow_up_date == today

    def test_set_follow_up_in_past(self, user, client_record):
        with pytest.raises(InvalidFollowUpError):
            set_follow_up(
                owner=user,
                client_id=client_record.id,
                follow_up_date=timezone.localdate() - timedelta(days=1),
            )

    def test_complete_follow_up(self, user, client_record):
        set_follow_up(owner=user, client_id=client_record.id, follow_up_date=timezone.localdate(), note='x')
        client = complete_follow_up(owner=user, client_id=client_record.id)

        assert client.follow_up_date is None
        assert client.follow_up_note == ''

    def test_snooze_from_future_date(self, user, client_record):
        when = timezone.localdate() + timedelta(days=5)
        set_follow_up(owner=user, client_id=client_record.id, follow_up_date=when)

        client = snooze_follow_up(owner=user, client_id=client_record.id, days=2)
        assert client.follow_up_date == when + timedelta(days=2)

    def test_snooze_overdue_counts_from_today(self, user, client_record):
        client_record.follow_up_date = timezone.localdate() - timedelta(days=10)
        client_record.save()
        assert client_record.follow_up_overdue is True

        client = snooze_follow_up(owner=user, client_id=client_record.id, days=3)
        assert client.follow_up_date == timezone.localdate() + timedelta(days=3)

    def test_snooze_without_follow_up(self, user, client_record):
        with pytest.raises(InvalidFollowUpError):
            snooze_follow_up(owner=user, client_id=client_record.id, days=1)

    def test_snooze_requires_positive_days(self, user, client_record):
        with pytest.raises(InvalidFollowUpError):
            snooze_follow_up(owner=user, client_id=client_record.id, days=0)

    def test_upcoming_follow_ups(self, user, client_record, lead, inactive_client):
        today = timezone.localdate()
        client_record.follow_up_date = today + timedelta(days=20)
        client_record.save()
        lead.follow_up_date = today - timedelta(days=2)
        lead.save()

        assert list(get_upcoming_follow_ups(owner=user)) == [lead, client_record]
        assert list(get_upcoming_follow_ups(owner=user, within_days=7)) == [lead]


# =============================================================================
# Payment Behavior
# =============================================================================

class TestRateAverageDays:
    """Tests for the days-to-pay buckets."""

    @pytest.mark.parametrize('days,rating', [
        (0, 'excellent'),
        (7, 'excellent'),
        (7.1, 'good'),
        (14, 'good'),
        (20, 'slow'),
        (30, 'slow'),
        (31, 'poor'),
        (None, 'new'),
    ])
    def test_buckets(self, days, rating):
        assert rate_average_days(days) == rating


@pytest.mark.django_db
class TestPaymentBehavior:
    """Tests for calculate_payment_behavior."""

    def test_no_history(self, client_record):
        assert calculate_payment_behavior(client_record) == {
            'rating': 'new',
            'average_days': None,
            'paid_invoice_count': 0,
        }

    def test_average_of_paid_invoices(self, client_record, paid_invoice_factory):
        paid_invoice_factory(client_record, days=5, number=1)
        paid_invoice_factory(client_record, days=15, number=2)

        result = calculate_payment_behavior(client_record)
        assert result == {'rating': 'good', 'average_days': 10.0, 'paid_invoice_count': 2}

    def test_ignores_unpaid_invoices(self, client_record, invoice, paid_invoice_factory):
        paid_invoice_factory(client_record, days=40, number=99)

        result = calculate_payment_behavior(client_record)
        assert result['paid_invoice_count'] == 1
        assert result['rating'] == 'poor'
