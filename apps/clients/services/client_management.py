"""
Client management service.

Every lookup is scoped to the owning freelancer: another user's client is
reported as not found.
"""

from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Q, QuerySet

from apps.accounts.models import User
from apps.clients.models import Client, ClientNote, ClientStatus
from apps.notifications.services import notify_new_client

from .exceptions import (
    ClientNotFoundError,
    ClientHasDependentsError,
    ClientNoteNotFoundError,
)

EDITABLE_FIELDS = ('name', 'email', 'company', 'phone', 'address', 'notes', 'status')


def list_clients(
    *,
    owner: User,
    status: Optional[str] = None,
    search: Optional[str] = None
) -> QuerySet[Client]:
    queryset = Client.objects.filter(owner=owner).annotate(
        project_count=Count('projects', distinct=True),
    )

    if status:
        queryset = queryset.filter(status=status)

    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) |
            Q(email__icontains=search) |
            Q(company__icontains=search)
        )

    return queryset.order_by('-created_at')


def get_client(*, owner: User, client_id: UUID) -> Client:
    """
    Raises:
        ClientNotFoundError: If the client does not exist for this owner
    """
    try:
        return Client.objects.get(id=client_id, owner=owner)
    except Client.DoesNotExist:
        raise ClientNotFoundError("Client not found")


@transaction.atomic
def create_client(*, owner: User, name: str, email: str, **fields) -> Client:
    client = Client.objects.create(
        owner=owner,
        name=name,
        email=email,
        **{k: v for k, v in fields.items() if k in EDITABLE_FIELDS and v is not None},
    )
    notify_new_client(client=client)
    return client


@transaction.atomic
def update_client(*, owner: User, client_id: UUID, **changes) -> Client:
    try:
        client = Client.objects.select_for_update().get(id=client_id, owner=owner)
    except Client.DoesNotExist:
        raise ClientNotFoundError("Client not found")

    update_fields = []
    for field in EDITABLE_FIELDS:
        if field in changes and changes[field] is not None:
            setattr(client, field, changes[field])
            update_fields.append(field)

    if update_fields:
        client.save(update_fields=update_fields + ['updated_at'])
    return client


@transaction.atomic
def delete_client(*, owner: User, client_id: UUID) -> None:
    """
    Delete a client without history.

    Raises:
        ClientNotFoundError: If the client does not exist
        ClientHasDependentsError: If the client has projects or invoices
    """
    client = get_client(owner=owner, client_id=client_id)

    if client.projects.exists():
        raise ClientHasDependentsError(
            "Cannot delete a client with projects. Delete or reassign the projects first."
        )
    if client.invoices.exists():
        raise ClientHasDependentsError("Cannot delete a client with invoices.")

    client.delete()


def get_status_counts(*, owner: User) -> dict:
    """Return {'all', 'lead', 'active', 'inactive'} client counts."""
    counts = {'all': 0}
    for status in ClientStatus.values:
        counts[status] = 0

    rows = Client.objects.filter(owner=owner).values('status').annotate(n=Count('id'))
    for row in rows:
        counts[row['status']] = row['n']
        counts['all'] += row['n']
    return counts


def activate_lead(client: Client) -> bool:
    """Promote a lead to active once real work starts. Returns True if changed."""
    if client.status != ClientStatus.LEAD:
        return False
    client.status = ClientStatus.ACTIVE
    client.save(update_fields=['status', 'updated_at'])
    return True


# =============================================================================
# Notes
# =============================================================================

def list_notes(*, owner: User, client_id: UUID) -> QuerySet[ClientNote]:
    client = get_client(owner=owner, client_id=client_id)
    return client.client_notes.select_related('author').all()


def add_note(*, owner: User, client_id: UUID, content: str) -> ClientNote:
    client = get_client(owner=owner, client_id=client_id)
    return ClientNote.objects.create(client=client, author=owner, content=content)


def delete_note(*, owner: User, client_id: UUID, note_id: UUID) -> None:
    client = get_client(owner=owner, client_id=client_id)
    deleted, _ = ClientNote.objects.filter(id=note_id, client=client).delete()
    if not deleted:
        raise ClientNoteNotFoundError("Note not found")
