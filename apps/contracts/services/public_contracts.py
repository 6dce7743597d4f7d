"""
Client side of the signing workflow, addressed by sign token.

Drafts are never exposed. Expiry applies to contracts still waiting on the
client; a signed contract stays viewable after its expiry date.
"""

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.contracts.models import Contract, ContractStatus, OPEN_STATUSES
from apps.notifications import emails
from apps.notifications.services import (
    notify_contract_signed,
    notify_contract_declined,
    notify_contract_viewed,
)

from .exceptions import (
    ContractNotFoundError,
    ContractExpiredError,
    ContractAlreadySignedError,
    InvalidContractStateError,
    TermsNotAcceptedError,
)

logger = logging.getLogger(__name__)


def get_contract_by_token(sign_token: str, lock: bool = False) -> Contract:
    queryset = Contract.objects.select_related('owner', 'client', 'project').exclude(status=ContractStatus.DRAFT)
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(sign_token=sign_token)
    except Contract.DoesNotExist:
        raise ContractNotFoundError("Contract not found")


def _is_past_expiry(contract: Contract) -> bool:
    return bool(contract.expires_at and contract.expires_at < timezone.now())


def _check_not_expired(contract: Contract) -> None:
    """Raise for expired contracts, recording the expiry on open ones."""
    if contract.status == ContractStatus.EXPIRED:
        raise ContractExpiredError("This contract has expired")
    if contract.status in OPEN_STATUSES and _is_past_expiry(contract):
        Contract.objects.filter(id=contract.id, status__in=OPEN_STATUSES).update(
            status=ContractStatus.EXPIRED,
            updated_at=timezone.now(),
        )
        raise ContractExpiredError("This contract has expired")


def _record_view(contract: Contract) -> None:
    if contract.status != ContractStatus.SENT or contract.viewed_at is not None:
        return
    updated = Contract.objects.filter(
        id=contract.id,
        status=ContractStatus.SENT,
        viewed_at__isnull=True,
    ).update(status=ContractStatus.VIEWED, viewed_at=timezone.now(), updated_at=timezone.now())
    if updated:
        contract.refresh_from_db()
        notify_contract_viewed(contract=contract)
        logger.info("Contract %s viewed by client", contract.id)


def get_public_contract(sign_token: str) -> dict:
    """
    Signing page payload.

    Signed contracts return a short summary with ``already_signed`` set.
    The first view of a sent contract marks it viewed.
    """
    contract = get_contract_by_token(sign_token)

    if contract.status == ContractStatus.SIGNED:
        return {
            'id': str(contract.id),
            'name': contract.name,
            'status': contract.status,
            'signed_at': contract.signed_at,
            'already_signed': True,
        }

    _check_not_expired(contract)
    _record_view(contract)

    client = contract.client
    project = contract.project
    return {
        'id': str(contract.id),
        'name': contract.name,
        'content': contract.content,
        'status': contract.status,
        'expires_at': contract.expires_at,
        'developer_signature': contract.developer_signature or None,
        'developer_signed_at': contract.developer_signed_at,
        'signed_at': contract.signed_at,
        'decline_reason': contract.decline_reason or None,
        'client': {
            'name': client.name,
            'email': client.email,
            'company': client.company or None,
        },
        'project': {'name': project.name} if project else None,
        'business': contract.owner.business_info(),
        'already_signed': False,
    }


def sign_contract(
    *,
    sign_token: str,
    signature: str,
    signed_name: str,
    signed_email: str,
    agreed_to_terms: bool,
    ip_address: Optional[str] = None,
    user_agent: str = ''
) -> Contract:
    """
    Record the client's signature with its audit metadata.

    Raises:
        TermsNotAcceptedError: If the client did not agree to the terms
        ContractNotFoundError: If the token is unknown
        ContractAlreadySignedError: If the contract is already signed
        InvalidContractStateError: If the contract was declined
        ContractExpiredError: If the contract has expired
    """
    if not agreed_to_terms:
        raise TermsNotAcceptedError("You must agree to the terms")

    with transaction.atomic():
        contract = get_contract_by_token(sign_token, lock=True)
        if contract.status == ContractStatus.SIGNED:
            raise ContractAlreadySignedError("Contract has already been signed")
        if contract.status == ContractStatus.DECLINED:
            raise InvalidContractStateError("Contract has been declined")
        if contract.status == ContractStatus.EXPIRED or _is_past_expiry(contract):
            raise ContractExpiredError("Contract has expired")

        contract.status = ContractStatus.SIGNED
        contract.signed_at = timezone.now()
        contract.client_signature = signature
        contract.client_signed_name = signed_name
        contract.client_signed_email = signed_email
        contract.client_ip = ip_address
        contract.client_user_agent = (user_agent or '')[:500]
        contract.save(update_fields=[
            'status', 'signed_at', 'client_signature', 'client_signed_name',
            'client_signed_email', 'client_ip', 'client_user_agent', 'updated_at',
        ])

    logger.info("Contract %s signed by %s from %s", contract.id, signed_email, ip_address)
    notify_contract_signed(contract=contract)
    emails.send_contract_signed_emails(contract)
    return contract


def decline_contract(*, sign_token: str, reason: str = '') -> Contract:
    with transaction.atomic():
        contract = get_contract_by_token(sign_token, lock=True)
        if contract.status == ContractStatus.SIGNED:
            raise ContractAlreadySignedError("Contract has already been signed")
        if contract.status == ContractStatus.DECLINED:
            raise InvalidContractStateError("Contract has already been declined")

        contract.status = ContractStatus.DECLINED
        contract.declined_at = timezone.now()
        contract.decline_reason = reason or ''
        contract.save(update_fields=['status', 'declined_at', 'decline_reason', 'updated_at'])

    logger.info("Contract %s declined by client", contract.id)
    notify_contract_declined(contract=contract)
    emails.send_contract_declined_email(contract)
    return contract


def get_signed_contract_by_token(sign_token: str) -> Contract:
    """Signed contracts only; used for the client's PDF copy."""
    contract = get_contract_by_token(sign_token)
    if contract.status != ContractStatus.SIGNED:
        raise InvalidContractStateError("Contract must be signed to download PDF")
    return contract
