from datetime import timedelta

import pytest
from django.utils import timezone

from apps.clients.services import ClientNotFoundError
from apps.contracts.models import Contract, ContractReminder, ContractStatus, Template, TemplateType
from apps.contracts.services import (
    substitute,
    default_variables,
    create_contract,
    create_from_template,
    update_contract,
    delete_contract,
    developer_sign,
    send_contract,
    send_reminder,
    expire_contracts,
    get_public_contract,
    sign_contract,
    decline_contract,
    get_signed_contract_by_token,
    list_templates,
    update_template,
    duplicate_template,
    delete_template,
    set_default_template,
    create_template,
    seed_system_templates,
    ContractNotFoundError,
    ContractNotEditableError,
    InvalidContractStateError,
    ContractExpiredError,
    ContractAlreadySignedError,
    TermsNotAcceptedError,
    TemplateNotFoundError,
    SystemTemplateError,
)
from apps.notifications.models import Notification, NotificationType


def sign(contract, **overrides):
    data = {
        'sign_token': contract.sign_token,
        'signature': 'Jane Client',
        'signed_name': 'Jane Client',
        'signed_email': 'jane@acme.example.com',
        'agreed_to_terms': True,
        'ip_address': '203.0.113.7',
        'user_agent': 'Mozilla/5.0',
    }
    data.update(overrides)
    return sign_contract(**data)


# =============================================================================
# VARIABLES
# =============================================================================

class TestSubstitute:

    def test_replaces_known_keys(self):
        result = substitute('Hello {{ Client_Name }}, see {{date}}.', {'client_name': 'Acme', 'date': 'May 1, 2030'})

        assert result == 'Hello Acme, see May 1, 2030.'

    def test_unknown_keys_left_in_place(self):
        assert substitute('Fee: {{ retainer }}', {'client_name': 'Acme'}) == 'Fee: {{ retainer }}'


@pytest.mark.django_db
class TestDefaultVariables:

    def test_with_project(self, user, client_record, project):
        values = default_variables(owner=user, client=client_record, project=project)

        assert values['developer_name'] == 'Test Studio'
        assert values['project_name'] == 'Website Redesign'
        assert values['total_amount'] == '$3,000.00'
        assert values['start_date'] == 'TBD'
        assert values['milestones'] == '1. **Design** - $1,000.00\n2. **Build** - $2,000.00'

    def test_without_project(self, user, client_record):
        values = default_variables(owner=user, client=client_record, name='Retainer')

        assert values['project_name'] == 'Retainer'
        assert values['milestones'] == 'To be defined'
        assert values['scope_description'] == 'To be defined'


# =============================================================================
# CONTRACT MANAGEMENT
# =============================================================================

@pytest.mark.django_db
class TestCreateContract:

    def test_create(self, user, client_record, project):
        contract = create_contract(
            owner=user,
            client_id=client_record.id,
            project_id=project.id,
            name='NDA',
            content='Keep it secret.',
        )

        assert contract.status == ContractStatus.DRAFT
        assert len(contract.sign_token) == 21

    def test_foreign_client(self, user, other_client_record):
        with pytest.raises(ClientNotFoundError):
            create_contract(owner=user, client_id=other_client_record.id, name='NDA', content='x')

    def test_from_template(self, user, client_record, project, template):
        contract = create_from_template(
            owner=user,
            template_id=template.id,
            client_id=client_record.id,
            project_id=project.id,
            name='Redesign Agreement',
        )

        assert contract.template == template
        assert contract.content == (
            'Agreement between Test Studio and Acme Corp for Website Redesign.\n\n'
            '1. **Design** - $1,000.00\n2. **Build** - $2,000.00'
        )

    def test_from_template_overrides(self, user, client_record, template):
        contract = create_from_template(
            owner=user,
            template_id=template.id,
            client_id=client_record.id,
            name='Retainer',
            variables={'client_name': 'ACME Holdings'},
        )

        assert 'and ACME Holdings for Retainer' in contract.content

    def test_from_other_users_template(self, other_user, user, client_record, template):
        with pytest.raises(TemplateNotFoundError):
            create_from_template(
                owner=other_user,
                template_id=template.id,
                client_id=client_record.id,
                name='Nope',
            )


@pytest.mark.django_db
class TestUpdateAndDelete:

    def test_update_draft(self, user, contract):
        updated = update_contract(owner=user, contract_id=contract.id, name='Renamed', status='signed')

        assert updated.name == 'Renamed'
        assert updated.status == ContractStatus.DRAFT

    def test_update_sent_contract(self, user, sent_contract):
        with pytest.raises(ContractNotEditableError):
            update_contract(owner=user, contract_id=sent_contract.id, name='Renamed')

    def test_update_other_users_contract(self, other_user, contract):
        with pytest.raises(ContractNotFoundError):
            update_contract(owner=other_user, contract_id=contract.id, name='Mine')

    def test_delete_sent_contract(self, user, sent_contract):
        delete_contract(owner=user, contract_id=sent_contract.id)

        assert not Contract.objects.filter(id=sent_contract.id).exists()

    def test_delete_signed_contract(self, user, sent_contract):
        sign(sent_contract)

        with pytest.raises(ContractNotEditableError):
            delete_contract(owner=user, contract_id=sent_contract.id)


@pytest.mark.django_db
class TestDeveloperSign:

    def test_countersign(self, user, contract):
        signed = developer_sign(owner=user, contract_id=contract.id, signature='Test Studio')

        assert signed.developer_signature == 'Test Studio'
        assert signed.developer_signed_at is not None

    def test_declined_contract(self, user, sent_contract):
        decline_contract(sign_token=sent_contract.sign_token)

        with pytest.raises(InvalidContractStateError):
            developer_sign(owner=user, contract_id=sent_contract.id, signature='Test Studio')


@pytest.mark.django_db
class TestSendContract:

    def test_send(self, user, contract, mailoutbox):
        sent, email_sent = send_contract(owner=user, contract_id=contract.id)

        assert email_sent is True
        assert sent.status == ContractStatus.SENT
        assert sent.sent_at is not None
        assert sent.expires_at - sent.sent_at == timedelta(days=30)
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ['billing@acme.example.com']
        assert mailoutbox[0].reply_to == ['testuser@example.com']
        assert contract.sign_token in mailoutbox[0].body

    def test_keeps_existing_expiry(self, user, contract):
        expiry = timezone.now() + timedelta(days=5)
        contract.expires_at = expiry
        contract.save()

        sent, _ = send_contract(owner=user, contract_id=contract.id)

        assert sent.expires_at == expiry

    def test_send_twice(self, user, sent_contract):
        with pytest.raises(InvalidContractStateError, match='already been sent'):
            send_contract(owner=user, contract_id=sent_contract.id)


@pytest.mark.django_db
class TestSendReminder:

    def test_reminder(self, user, sent_contract, mailoutbox):
        reminder, email_sent = send_reminder(owner=user, contract_id=sent_contract.id, message='Friendly nudge')

        assert email_sent is True
        assert reminder.sent_to_email == 'billing@acme.example.com'
        assert reminder.custom_message == 'Friendly nudge'
        assert 'Friendly nudge' in mailoutbox[0].body
        assert Notification.objects.filter(type=NotificationType.CONTRACT_REMINDER_SENT).count() == 1

    def test_draft_contract(self, user, contract):
        with pytest.raises(InvalidContractStateError):
            send_reminder(owner=user, contract_id=contract.id)

    def test_expired_contract(self, user, sent_contract):
        sent_contract.expires_at = timezone.now() - timedelta(hours=1)
        sent_contract.save()

        with pytest.raises(ContractExpiredError):
            send_reminder(owner=user, contract_id=sent_contract.id)
        assert not ContractReminder.objects.exists()


@pytest.mark.django_db
class TestExpireContracts:

    def test_expires_open_contracts_past_expiry(self, sent_contract):
        now = sent_contract.expires_at + timedelta(minutes=1)

        assert expire_contracts(now=now) == 1
        sent_contract.refresh_from_db()
        assert sent_contract.status == ContractStatus.EXPIRED

    def test_ignores_signed_and_future(self, sent_contract):
        assert expire_contracts() == 0

        sign(sent_contract)
        assert expire_contracts(now=sent_contract.expires_at + timedelta(days=1)) == 0


# =============================================================================
# SIGNING PAGE
# =============================================================================

@pytest.mark.django_db
class TestPublicContract:

    def test_draft_hidden(self, contract):
        with pytest.raises(ContractNotFoundError):
            get_public_contract(contract.sign_token)

    def test_first_view_marks_viewed(self, sent_contract, user):
        data = get_public_contract(sent_contract.sign_token)
        get_public_contract(sent_contract.sign_token)

        assert data['status'] == ContractStatus.VIEWED
        assert data['already_signed'] is False
        assert data['client']['name'] == 'Acme Corp'
        assert data['project'] == {'name': 'Website Redesign'}
        assert data['business']['name'] == 'Test Studio'
        assert Notification.objects.filter(user=user, type=NotificationType.CONTRACT_VIEWED).count() == 1

    def test_past_expiry_marks_expired(self, sent_contract):
        sent_contract.expires_at = timezone.now() - timedelta(days=1)
        sent_contract.save()

        with pytest.raises(ContractExpiredError):
            get_public_contract(sent_contract.sign_token)
        sent_contract.refresh_from_db()
        assert sent_contract.status == ContractStatus.EXPIRED

    def test_signed_summary_after_expiry(self, sent_contract):
        sign(sent_contract)
        Contract.objects.filter(id=sent_contract.id).update(expires_at=timezone.now() - timedelta(days=1))

        data = get_public_contract(sent_contract.sign_token)

        assert data['already_signed'] is True
        assert 'content' not in data


@pytest.mark.django_db
class TestSignContract:

    def test_sign(self, sent_contract, user, mailoutbox):
        contract = sign(sent_contract)

        assert contract.status == ContractStatus.SIGNED
        assert contract.client_ip == '203.0.113.7'
        assert contract.client_user_agent == 'Mozilla/5.0'
        assert contract.client_signed_email == 'jane@acme.example.com'
        assert Notification.objects.filter(user=user, type=NotificationType.CONTRACT_SIGNED).count() == 1
        assert sorted(m.to[0] for m in mailoutbox) == ['jane@acme.example.com', 'testuser@example.com']

    def test_owner_opted_out_of_signed_email(self, sent_contract, user, mailoutbox):
        user.email_contract_signed = False
        user.save()

        sign(sent_contract)

        assert [m.to for m in mailoutbox] == [['jane@acme.example.com']]

    def test_terms_required(self, sent_contract):
        with pytest.raises(TermsNotAcceptedError):
            sign(sent_contract, agreed_to_terms=False)

    def test_sign_twice(self, sent_contract):
        sign(sent_contract)

        with pytest.raises(ContractAlreadySignedError):
            sign(sent_contract)

    def test_declined_contract(self, sent_contract):
        decline_contract(sign_token=sent_contract.sign_token)

        with pytest.raises(InvalidContractStateError):
            sign(sent_contract)

    def test_expired_contract(self, sent_contract):
        sent_contract.expires_at = timezone.now() - timedelta(minutes=5)
        sent_contract.save()

        with pytest.raises(ContractExpiredError):
            sign(sent_contract)

    def test_user_agent_truncated(self, sent_contract):
        contract = sign(sent_contract, user_agent='x' * 800)

        assert len(contract.client_user_agent) == 500


@pytest.mark.django_db
class TestDeclineContract:

    def test_decline(self, sent_contract, user, mailoutbox):
        contract = decline_contract(sign_token=sent_contract.sign_token, reason='Budget cut')

        assert contract.status == ContractStatus.DECLINED
        assert contract.decline_reason == 'Budget cut'
        assert Notification.objects.filter(user=user, type=NotificationType.CONTRACT_DECLINED).count() == 1
        assert mailoutbox[0].to == ['testuser@example.com']

    def test_decline_twice(self, sent_contract):
        decline_contract(sign_token=sent_contract.sign_token)

        with pytest.raises(InvalidContractStateError, match='already been declined'):
            decline_contract(sign_token=sent_contract.sign_token)

    def test_decline_signed(self, sent_contract):
        sign(sent_contract)

        with pytest.raises(ContractAlreadySignedError):
            decline_contract(sign_token=sent_contract.sign_token)

    def test_pdf_requires_signature(self, sent_contract):
        with pytest.raises(InvalidContractStateError):
            get_signed_contract_by_token(sent_contract.sign_token)

        sign(sent_contract)
        assert get_signed_contract_by_token(sent_contract.sign_token).id == sent_contract.id


# =============================================================================
# TEMPLATES
# =============================================================================

@pytest.mark.django_db
class TestTemplates:

    def test_list_system_first(self, user, template, system_template, other_user):
        Template.objects.create(owner=other_user, type=TemplateType.CONTRACT, name='Private', content='x')

        names = [t.name for t in list_templates(owner=user)]

        assert names == ['Web Development Agreement', 'Fixed Price']

    def test_filter_by_type(self, user, template):
        create_template(owner=user, type=TemplateType.INVOICE, name='Invoice note', content='Thanks!')

        assert [t.name for t in list_templates(owner=user, type=TemplateType.INVOICE)] == ['Invoice note']

    def test_system_template_read_only(self, user, system_template):
        with pytest.raises(SystemTemplateError):
            update_template(owner=user, template_id=system_template.id, name='Mine now')
        with pytest.raises(SystemTemplateError):
            delete_template(owner=user, template_id=system_template.id)
        with pytest.raises(SystemTemplateError):
            set_default_template(owner=user, template_id=system_template.id)

    def test_duplicate_system_template(self, user, system_template):
        copy = duplicate_template(owner=user, template_id=system_template.id)

        assert copy.owner == user
        assert copy.name == 'Web Development Agreement (Copy)'
        assert copy.is_system is False
        assert copy.content == system_template.content

    def test_single_default_per_type(self, user, template):
        other = create_template(owner=user, type=TemplateType.CONTRACT, name='Hourly', content='x', is_default=True)

        set_default_template(owner=user, template_id=template.id)

        other.refresh_from_db()
        template.refresh_from_db()
        assert template.is_default is True
        assert other.is_default is False

    def test_update_to_default(self, user, template):
        other = create_template(owner=user, type=TemplateType.CONTRACT, name='Hourly', content='x', is_default=True)

        update_template(owner=user, template_id=template.id, is_default=True)

        other.refresh_from_db()
        assert other.is_default is False

    def test_seed_is_idempotent(self, db):
        created = seed_system_templates()

        assert created == ['Web Development Agreement', 'Consulting Agreement']
        assert seed_system_templates() == []
        assert Template.objects.filter(is_system=True, owner__isnull=True).count() == 2
