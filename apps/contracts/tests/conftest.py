from datetime import timedelta

import pytest
from django.utils import timezone

from apps.contracts.models import Contract, ContractStatus, Template, TemplateType


@pytest.fixture
def contract(db, user, client_record, project):
    """A draft contract for the test project."""
    return Contract.objects.create(
        owner=user,
        client=client_record,
        project=project,
        name='Website Redesign Agreement',
        content='# Agreement\n\nThe developer will redesign the **marketing site**.',
    )


@pytest.fixture
def sent_contract(contract):
    """The draft contract sent to the client, expiring in 30 days."""
    contract.status = ContractStatus.SENT
    contract.sent_at = timezone.now()
    contract.expires_at = timezone.now() + timedelta(days=30)
    contract.save()
    return contract


@pytest.fixture
def template(db, user):
    """An own contract template with placeholders."""
    return Template.objects.create(
        owner=user,
        type=TemplateType.CONTRACT,
        name='Fixed Price',
        content='Agreement between {{developer_name}} and {{ client_name }} for {{project_name}}.\n\n{{milestones}}',
    )


@pytest.fixture
def system_template(db):
    return Template.objects.create(
        owner=None,
        type=TemplateType.CONTRACT,
        name='Web Development Agreement',
        content='Scope: {{scope_description}}',
        is_system=True,
    )
