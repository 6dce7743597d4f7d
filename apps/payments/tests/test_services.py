from unittest.mock import patch

import pytest
import stripe

from apps.invoices.models import InvoicePayment, InvoiceStatus, PaymentMethod
from apps.notifications.models import Notification, NotificationType
from apps.invoices.services import InvoiceNotFoundError, cancel_invoice
from apps.payments.services import (
    get_connect_status,
    get_onboarding_link,
    get_dashboard_link,
    get_balance,
    disconnect,
    resolve_checkout_amount,
    platform_fee,
    create_checkout_session,
    process_webhook,
    credit_invoice,
    StripeNotConnectedError,
    InvoiceNotPayableError,
    InvalidCheckoutAmountError,
    WebhookSignatureError,
)
from apps.payments.stripe_client import PaymentProviderError


def webhook_event(event_type, obj):
    return {'id': 'evt_1', 'type': event_type, 'data': {'object': obj}}


# =============================================================================
# CONNECT
# =============================================================================

@pytest.mark.django_db
class TestConnectStatus:

    def test_without_account(self, user):
        result = get_connect_status(user)

        assert result['connected'] is False
        assert result['account_id'] is None

    @patch('apps.payments.stripe_client.get_account_status')
    def test_syncs_connected_flag(self, mock_status, user):
        user.stripe_account_id = 'acct_123'
        user.save()
        mock_status.return_value = {
            'id': 'acct_123',
            'charges_enabled': True,
            'payouts_enabled': True,
            'details_submitted': True,
            'requirements': None,
        }

        result = get_connect_status(user)

        assert result['connected'] is True
        user.refresh_from_db()
        assert user.stripe_connected is True

    @patch('apps.payments.stripe_client.get_account_status')
    def test_clears_flag_when_payouts_disabled(self, mock_status, connected_user):
        mock_status.return_value = {
            'id': 'acct_123',
            'charges_enabled': True,
            'payouts_enabled': False,
            'details_submitted': True,
            'requirements': {'currently_due': ['external_account']},
        }

        result = get_connect_status(connected_user)

        assert result['connected'] is False
        connected_user.refresh_from_db()
        assert connected_user.stripe_connected is False

    @patch('apps.payments.stripe_client.get_account_status')
    def test_provider_error_reported(self, mock_status, connected_user):
        mock_status.side_effect = PaymentProviderError('Stripe account lookup failed')

        result = get_connect_status(connected_user)

        assert result['connected'] is False
        assert result['account_id'] == 'acct_123'
        assert 'error' in result


@pytest.mark.django_db
class TestOnboarding:

    @patch('apps.payments.stripe_client.create_onboarding_link')
    @patch('apps.payments.stripe_client.create_connect_account')
    def test_creates_account_on_first_use(self, mock_account, mock_link, user):
        mock_account.return_value = {'id': 'acct_new'}
        mock_link.return_value = 'https://connect.stripe.com/setup/abc'

        url = get_onboarding_link(user)

        assert url == 'https://connect.stripe.com/setup/abc'
        user.refresh_from_db()
        assert user.stripe_account_id == 'acct_new'
        assert mock_link.call_args.args[0] == 'acct_new'
        assert mock_link.call_args.kwargs['return_url'].endswith('stripe=success')

    @patch('apps.payments.stripe_client.create_onboarding_link')
    @patch('apps.payments.stripe_client.create_connect_account')
    def test_reuses_existing_account(self, mock_account, mock_link, connected_user):
        mock_link.return_value = 'https://connect.stripe.com/setup/abc'

        get_onboarding_link(connected_user)

        mock_account.assert_not_called()

    def test_dashboard_requires_account(self, user):
        with pytest.raises(StripeNotConnectedError):
            get_dashboard_link(user)


@pytest.mark.django_db
class TestBalanceAndDisconnect:

    def test_balance_none_when_not_connected(self, user):
        assert get_balance(user) is None

    @patch('apps.payments.stripe_client.get_balance')
    def test_balance(self, mock_balance, connected_user):
        mock_balance.return_value = {
            'available': [{'amount': 5000, 'currency': 'usd'}],
            'pending': [],
        }

        result = get_balance(connected_user)

        assert result['available'][0]['amount'] == 5000
        mock_balance.assert_called_once_with('acct_123')

    @patch('apps.payments.stripe_client.get_balance')
    def test_balance_provider_error(self, mock_balance, connected_user):
        mock_balance.side_effect = PaymentProviderError('Stripe balance lookup failed')

        assert get_balance(connected_user) is None

    def test_disconnect(self, connected_user):
        disconnect(connected_user)

        connected_user.refresh_from_db()
        assert connected_user.stripe_account_id is None
        assert connected_user.stripe_connected is False


# =============================================================================
# CHECKOUT
# =============================================================================

@pytest.mark.django_db
class TestResolveCheckoutAmount:

    def test_defaults_to_balance(self, payable_invoice):
        assert resolve_checkout_amount(payable_invoice) == 150000

    def test_full_balance_always_allowed(self, payable_invoice):
        assert resolve_checkout_amount(payable_invoice, 150000) == 150000

    def test_partial_requires_opt_in(self, payable_invoice):
        with pytest.raises(InvalidCheckoutAmountError, match='Partial payments'):
            resolve_checkout_amount(payable_invoice, 50000)

    def test_partial_amount(self, payable_invoice):
        payable_invoice.allow_partial_payments = True
        payable_invoice.minimum_payment = 25000

        assert resolve_checkout_amount(payable_invoice, 50000) == 50000

    def test_below_minimum(self, payable_invoice):
        payable_invoice.allow_partial_payments = True
        payable_invoice.minimum_payment = 25000

        with pytest.raises(InvalidCheckoutAmountError, match='Minimum payment is 25000'):
            resolve_checkout_amount(payable_invoice, 10000)

    def test_minimum_capped_at_balance(self, payable_invoice):
        payable_invoice.allow_partial_payments = True
        payable_invoice.minimum_payment = 100000
        payable_invoice.paid_amount = 90000

        # 60000 is left, which is below the configured minimum
        assert resolve_checkout_amount(payable_invoice, 60000) == 60000

    def test_exceeds_balance(self, payable_invoice):
        payable_invoice.allow_partial_payments = True

        with pytest.raises(InvalidCheckoutAmountError, match='exceeds'):
            resolve_checkout_amount(payable_invoice, 150001)


def test_platform_fee(settings):
    settings.STRIPE_PLATFORM_FEE_PERCENT = 1

    assert platform_fee(150000) == 1500
    assert platform_fee(150) == 2
    assert platform_fee(149) == 1


@pytest.mark.django_db
class TestCreateCheckoutSession:

    @patch('apps.payments.stripe_client.create_checkout_session')
    def test_success(self, mock_session, payable_invoice, settings):
        settings.APP_URL = 'https://app.zovo.dev'
        mock_session.return_value = {'session_id': 'cs_1', 'url': 'https://checkout.stripe.com/c/cs_1'}

        result = create_checkout_session(payable_invoice.pay_token)

        assert result['session_id'] == 'cs_1'
        kwargs = mock_session.call_args.kwargs
        assert kwargs['amount'] == 150000
        assert kwargs['destination'] == 'acct_123'
        assert kwargs['customer_email'] == 'billing@acme.example.com'
        assert kwargs['description'] == 'Website Redesign - Invoice INV-0001'
        assert kwargs['metadata']['invoice_id'] == str(payable_invoice.id)
        assert kwargs['metadata']['payment_amount'] == '150000'
        assert kwargs['success_url'] == f'https://app.zovo.dev/pay/{payable_invoice.pay_token}?success=true'

    def test_draft_not_found(self, invoice, connected_user):
        with pytest.raises(InvoiceNotFoundError):
            create_checkout_session(invoice.pay_token)

    def test_paid_invoice(self, payable_invoice):
        payable_invoice.status = InvoiceStatus.PAID
        payable_invoice.save()

        with pytest.raises(InvoiceNotPayableError, match='already paid'):
            create_checkout_session(payable_invoice.pay_token)

    def test_cancelled_invoice(self, payable_invoice):
        payable_invoice.status = InvoiceStatus.CANCELLED
        payable_invoice.save()

        with pytest.raises(InvoiceNotPayableError, match='cancelled'):
            create_checkout_session(payable_invoice.pay_token)

    def test_owner_not_connected(self, payable_invoice, connected_user):
        connected_user.stripe_connected = False
        connected_user.save()

        with pytest.raises(StripeNotConnectedError):
            create_checkout_session(payable_invoice.pay_token)


# =============================================================================
# WEBHOOKS
# =============================================================================

@pytest.mark.django_db
class TestProcessWebhook:

    def test_missing_signature(self):
        with pytest.raises(WebhookSignatureError, match='Missing'):
            process_webhook(b'{}', None)

    @patch('apps.payments.stripe_client.construct_event')
    def test_invalid_signature(self, mock_construct):
        mock_construct.side_effect = stripe.error.SignatureVerificationError('bad', 't=1,v1=x')

        with pytest.raises(WebhookSignatureError, match='Invalid signature'):
            process_webhook(b'{}', 't=1,v1=x')

    @patch('apps.payments.stripe_client.construct_event')
    def test_invalid_payload(self, mock_construct):
        mock_construct.side_effect = ValueError('No JSON object could be decoded')

        with pytest.raises(WebhookSignatureError, match='Invalid payload'):
            process_webhook(b'nope', 't=1,v1=x')

    @patch('apps.payments.stripe_client.construct_event')
    def test_unhandled_event(self, mock_construct):
        mock_construct.return_value = webhook_event('customer.created', {'id': 'cus_1'})

        result = process_webhook(b'{}', 'sig')

        assert result == {'event_type': 'customer.created', 'handled': False, 'result': None}

    @patch('apps.payments.stripe_client.construct_event')
    def test_checkout_completed_credits_invoice(self, mock_construct, payable_invoice, mailoutbox):
        mock_construct.return_value = webhook_event('checkout.session.completed', {
            'id': 'cs_1',
            'payment_intent': 'pi_1',
            'amount_total': 150000,
            'metadata': {'invoice_id': str(payable_invoice.id), 'payment_amount': '150000'},
        })

        result = process_webhook(b'{}', 'sig')

        assert result['handled'] is True
        assert result['result']['credited'] is True
        payable_invoice.refresh_from_db()
        assert payable_invoice.status == InvoiceStatus.PAID
        assert payable_invoice.payment_method == PaymentMethod.STRIPE
        payment = InvoicePayment.objects.get(invoice=payable_invoice)
        assert payment.stripe_payment_id == 'pi_1'
        assert Notification.objects.filter(type=NotificationType.INVOICE_PAID).count() == 1
        assert len(mailoutbox) == 2

    @patch('apps.payments.stripe_client.construct_event')
    def test_redelivery_credits_once(self, mock_construct, payable_invoice):
        payable_invoice.allow_partial_payments = True
        payable_invoice.save()
        mock_construct.return_value = webhook_event('checkout.session.completed', {
            'id': 'cs_1',
            'payment_intent': 'pi_1',
            'metadata': {'invoice_id': str(payable_invoice.id), 'payment_amount': '50000'},
        })

        process_webhook(b'{}', 'sig')
        result = process_webhook(b'{}', 'sig')

        assert result['result']['credited'] is False
        payable_invoice.refresh_from_db()
        assert payable_invoice.paid_amount == 50000
        assert payable_invoice.status == InvoiceStatus.PARTIALLY_PAID

    @patch('apps.payments.stripe_client.construct_event')
    def test_payment_intent_succeeded_fallback(self, mock_construct, payable_invoice):
        mock_construct.return_value = webhook_event('payment_intent.succeeded', {
            'id': 'pi_2',
            'amount_received': 150000,
            'metadata': {'invoice_id': str(payable_invoice.id)},
        })

        result = process_webhook(b'{}', 'sig')

        assert result['result']['credited'] is True
        payable_invoice.refresh_from_db()
        assert payable_invoice.paid_amount == 150000

    @patch('apps.payments.stripe_client.construct_event')
    def test_payment_failed_notifies_owner(self, mock_construct, payable_invoice, user):
        mock_construct.return_value = webhook_event('payment_intent.payment_failed', {
            'id': 'pi_3',
            'metadata': {'invoice_id': str(payable_invoice.id)},
            'last_payment_error': {'code': 'card_declined', 'message': 'Your card was declined.'},
        })

        process_webhook(b'{}', 'sig')

        notification = Notification.objects.get(user=user)
        assert notification.type == NotificationType.PAYMENT_FAILED
        payable_invoice.refresh_from_db()
        assert payable_invoice.paid_amount == 0

    @patch('apps.payments.stripe_client.construct_event')
    def test_account_updated_connects_user(self, mock_construct, user):
        user.stripe_account_id = 'acct_123'
        user.save()
        mock_construct.return_value = webhook_event('account.updated', {
            'id': 'acct_123',
            'charges_enabled': True,
            'payouts_enabled': True,
            'metadata': {},
        })

        result = process_webhook(b'{}', 'sig')

        assert result['result']['connected'] is True
        user.refresh_from_db()
        assert user.stripe_connected is True
        assert Notification.objects.filter(user=user, type=NotificationType.STRIPE_CONNECTED).count() == 1

    @patch('apps.payments.stripe_client.construct_event')
    def test_account_updated_matches_metadata_user(self, mock_construct, connected_user):
        mock_construct.return_value = webhook_event('account.updated', {
            'id': 'acct_other',
            'charges_enabled': True,
            'payouts_enabled': True,
            'metadata': {'user_id': str(connected_user.id)},
        })

        result = process_webhook(b'{}', 'sig')

        assert result['result']['user_id'] == str(connected_user.id)
        # Already connected, so no new notification
        assert not Notification.objects.filter(type=NotificationType.STRIPE_CONNECTED).exists()

    @patch('apps.payments.stripe_client.construct_event')
    def test_account_updated_unknown_account(self, mock_construct):
        mock_construct.return_value = webhook_event('account.updated', {'id': 'acct_x', 'metadata': {}})

        result = process_webhook(b'{}', 'sig')

        assert result['result'] == {'user_id': None}

    @patch('apps.payments.stripe_client.construct_event')
    def test_checkout_for_cancelled_invoice_is_acknowledged(self, mock_construct, payable_invoice, user, mailoutbox):
        cancel_invoice(owner=user, invoice_id=payable_invoice.id)
        mock_construct.return_value = webhook_event('checkout.session.completed', {
            'id': 'cs_1',
            'payment_intent': 'pi_1',
            'metadata': {'invoice_id': str(payable_invoice.id), 'payment_amount': '150000'},
        })

        result = process_webhook(b'{}', 'sig')

        assert result['handled'] is True
        assert result['result']['credited'] is False
        payable_invoice.refresh_from_db()
        assert payable_invoice.status == InvoiceStatus.CANCELLED
        assert payable_invoice.paid_amount == 0
        assert not InvoicePayment.objects.exists()
        assert len(mailoutbox) == 0


@pytest.mark.django_db
class TestCreditInvoice:

    def test_skips_paid_invoice(self, payable_invoice):
        payable_invoice.status = InvoiceStatus.PAID
        payable_invoice.save()

        assert credit_invoice(invoice_id=payable_invoice.id, payment_intent_id='pi_9', amount=1000) is None
        assert not InvoicePayment.objects.exists()

    def test_unknown_invoice(self, db):
        missing = '00000000-0000-0000-0000-000000000000'

        assert credit_invoice(invoice_id=missing, payment_intent_id='pi_9', amount=None) is None

    def test_skips_cancelled_invoice(self, payable_invoice):
        payable_invoice.status = InvoiceStatus.CANCELLED
        payable_invoice.save()

        assert credit_invoice(invoice_id=payable_invoice.id, payment_intent_id='pi_9', amount=1000) is None
        assert not InvoicePayment.objects.exists()

    def test_skips_unusable_amount(self, payable_invoice):
        assert credit_invoice(invoice_id=payable_invoice.id, payment_intent_id='pi_9', amount=0) is None
        assert not InvoicePayment.objects.exists()

    def test_amount_defaults_to_total(self, payable_invoice):
        invoice = credit_invoice(invoice_id=payable_invoice.id, payment_intent_id='pi_9', amount=None)

        assert invoice.paid_amount == 150000
        assert invoice.status == InvoiceStatus.PAID
