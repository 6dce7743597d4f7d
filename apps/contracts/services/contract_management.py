"""
Contract CRUD and the owner side of the signing workflow.

Contracts are editable only as drafts. Sending stamps an expiry (30 days
by default) and emails the client a signing link.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.clients.models import Client
from apps.clients.services import ClientNotFoundError
from apps.contracts.models import Contract, ContractReminder, ContractStatus, OPEN_STATUSES, ReminderType
from apps.notifications import emails
from apps.notifications.services import notify_contract_reminder_sent
from apps.projects.models import Project
from apps.projects.services import ProjectNotFoundError

from .exceptions import (
    ContractNotFoundError,
    ContractNotEditableError,
    InvalidContractStateError,
    ContractExpiredError,
)
from .template_management import get_template
from .variables import default_variables, substitute

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_DAYS = 30
EDITABLE_FIELDS = ('name', 'content', 'expires_at')


def _resolve_client(owner: User, client_id: UUID) -> Client:
    try:
        return Client.objects.get(id=client_id, owner=owner)
    except Client.DoesNotExist:
        raise ClientNotFoundError("Client not found")


def _resolve_project(owner: User, project_id: Optional[UUID]) -> Optional[Project]:
    if not project_id:
        return None
    try:
        return Project.objects.get(id=project_id, owner=owner)
    except Project.DoesNotExist:
        raise ProjectNotFoundError("Project not found")


def _lock_contract(owner: User, contract_id: UUID) -> Contract:
    try:
        return (
            Contract.objects
            .select_for_update()
            .select_related('client', 'owner')
            .get(id=contract_id, owner=owner)
        )
    except Contract.DoesNotExist:
        raise ContractNotFoundError("Contract not found")


def list_contracts(
    *,
    owner: User,
    project_id: Optional[UUID] = None,
    client_id: Optional[UUID] = None,
    status: Optional[str] = None
) -> QuerySet[Contract]:
    queryset = Contract.objects.filter(owner=owner).select_related('client', 'project')
    if project_id:
        queryset = queryset.filter(project_id=project_id)
    if client_id:
        queryset = queryset.filter(client_id=client_id)
    if status:
        queryset = queryset.filter(status=status)
    return queryset.order_by('-created_at')


def get_contract(*, owner: User, contract_id: UUID) -> Contract:
    try:
        return (
            Contract.objects
            .select_related('client', 'project', 'template', 'owner')
            .get(id=contract_id, owner=owner)
        )
    except Contract.DoesNotExist:
        raise ContractNotFoundError("Contract not found")


def create_contract(
    *,
    owner: User,
    client_id: UUID,
    name: str,
    content: str,
    project_id: Optional[UUID] = None,
    template_id: Optional[UUID] = None,
    expires_at: Optional[datetime] = None
) -> Contract:
    client = _resolve_client(owner, client_id)
    project = _resolve_project(owner, project_id)
    template = get_template(owner=owner, template_id=template_id) if template_id else None

    contract = Contract.objects.create(
        owner=owner,
        client=client,
        project=project,
        template=template,
        name=name,
        content=content,
        expires_at=expires_at,
    )
    logger.info("Contract %s created for client %s", contract.id, client.id)
    return contract


def create_from_template(
    *,
    owner: User,
    template_id: UUID,
    client_id: UUID,
    name: str,
    project_id: Optional[UUID] = None,
    variables: Optional[dict] = None
) -> Contract:
    """
    Draft a contract from a template, filling in client, project and
    business details. ``variables`` override the computed values.
    """
    template = get_template(owner=owner, template_id=template_id)
    client = _resolve_client(owner, client_id)
    project = _resolve_project(owner, project_id)

    values = default_variables(owner=owner, client=client, project=project, name=name)
    values.update(variables or {})

    return Contract.objects.create(
        owner=owner,
        client=client,
        project=project,
        template=template,
        name=name,
        content=substitute(template.content, values),
    )


@transaction.atomic
def update_contract(*, owner: User, contract_id: UUID, **changes) -> Contract:
    contract = _lock_contract(owner, contract_id)
    if contract.status != ContractStatus.DRAFT:
        raise ContractNotEditableError("Only draft contracts can be edited")

    for field in EDITABLE_FIELDS:
        if field in changes:
            setattr(contract, field, changes[field])
    contract.save()
    return contract


@transaction.atomic
def delete_contract(*, owner: User, contract_id: UUID) -> None:
    contract = _lock_contract(owner, contract_id)
    if contract.status == ContractStatus.SIGNED:
        raise ContractNotEditableError("Cannot delete signed contracts")
    contract.delete()


def developer_sign(*, owner: User, contract_id: UUID, signature: str) -> Contract:
    """Countersign as the developer. Allowed until the contract is signed or declined."""
    with transaction.atomic():
        contract = _lock_contract(owner, contract_id)
        if contract.status in (ContractStatus.DECLINED, ContractStatus.EXPIRED):
            raise InvalidContractStateError(f"Cannot sign a {contract.get_status_display().lower()} contract")

        contract.developer_signature = signature
        contract.developer_signed_at = timezone.now()
        contract.save(update_fields=['developer_signature', 'developer_signed_at', 'updated_at'])
    return contract


def send_contract(*, owner: User, contract_id: UUID) -> tuple:
    """
    Send a draft contract to the client for signature.

    Returns:
        (contract, email_sent)
    """
    with transaction.atomic():
        contract = _lock_contract(owner, contract_id)
        if contract.status != ContractStatus.DRAFT:
            raise InvalidContractStateError("Contract has already been sent")

        now = timezone.now()
        contract.status = ContractStatus.SENT
        contract.sent_at = now
        if not contract.expires_at:
            contract.expires_at = now + timedelta(days=DEFAULT_EXPIRY_DAYS)
        contract.save(update_fields=['status', 'sent_at', 'expires_at', 'updated_at'])

    email_sent = emails.send_contract_email(contract)
    logger.info("Contract %s sent to %s (email sent: %s)", contract.id, contract.client.email, email_sent)
    return contract, email_sent


def send_reminder(*, owner: User, contract_id: UUID, message: str = '') -> tuple:
    """
    Remind the client to sign a sent or viewed contract.

    Returns:
        (reminder, email_sent)
    """
    contract = get_contract(owner=owner, contract_id=contract_id)
    if contract.status not in OPEN_STATUSES:
        raise InvalidContractStateError("Only sent or viewed contracts can be reminded")
    if contract.expires_at and contract.expires_at < timezone.now():
        raise ContractExpiredError("Contract has expired")

    reminder = ContractReminder.objects.create(
        contract=contract,
        reminder_type=ReminderType.MANUAL,
        custom_message=message,
        sent_to_email=contract.client.email,
        sent_to_name=contract.client.name,
    )
    email_sent = emails.send_contract_reminder_email(contract, message)
    if email_sent:
        notify_contract_reminder_sent(contract=contract)
    return reminder, email_sent


def list_reminders(*, owner: User, contract_id: UUID) -> QuerySet[ContractReminder]:
    contract = get_contract(owner=owner, contract_id=contract_id)
    return contract.reminders.order_by('-sent_at')


def expire_contracts(*, now: Optional[datetime] = None) -> int:
    """
    Move open contracts past their expiry to expired.

    Returns:
        Number of contracts expired
    """
    now = now or timezone.now()
    count = Contract.objects.filter(
        status__in=OPEN_STATUSES,
        expires_at__lt=now,
    ).update(status=ContractStatus.EXPIRED, updated_at=now)
    if count:
        logger.info("Expired %s contract(s)", count)
    return count
