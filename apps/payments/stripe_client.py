"""
Thin wrapper around the Stripe SDK.

Every call passes the platform secret key explicitly and converts SDK errors
into ``PaymentProviderError`` so services never depend on Stripe exceptions.
"""

import logging
from typing import Optional

import stripe
from django.conf import settings

logger = logging.getLogger(__name__)

PRODUCT_DESCRIPTION = 'Freelance software development services'


class PaymentProviderError(Exception):
    """Raised when a Stripe API call fails."""
    pass


def _api_key() -> str:
    return settings.STRIPE_SECRET_KEY


def _call(operation: str, func, *args, **kwargs):
    try:
        return func(*args, api_key=_api_key(), **kwargs)
    except stripe.error.StripeError as e:
        logger.error("Stripe %s failed: %s", operation, e)
        raise PaymentProviderError(f"Stripe {operation} failed") from e


# =============================================================================
# Connect accounts
# =============================================================================

def create_connect_account(*, user_id, email: str, business_name: Optional[str] = None):
    """Express account; country and business type are collected during onboarding."""
    return _call(
        'account creation',
        stripe.Account.create,
        type='express',
        email=email,
        business_profile={
            'name': business_name or None,
            'product_description': PRODUCT_DESCRIPTION,
        },
        metadata={'user_id': str(user_id)},
        capabilities={
            'card_payments': {'requested': True},
            'transfers': {'requested': True},
        },
    )


def create_onboarding_link(account_id: str, return_url: str, refresh_url: str) -> str:
    link = _call(
        'onboarding link',
        stripe.AccountLink.create,
        account=account_id,
        type='account_onboarding',
        return_url=return_url,
        refresh_url=refresh_url,
    )
    return link['url']


def create_dashboard_link(account_id: str) -> str:
    link = _call('dashboard link', stripe.Account.create_login_link, account_id)
    return link['url']


def get_account_status(account_id: str) -> dict:
    account = _call('account lookup', stripe.Account.retrieve, account_id)
    return {
        'id': account['id'],
        'charges_enabled': bool(account.get('charges_enabled')),
        'payouts_enabled': bool(account.get('payouts_enabled')),
        'details_submitted': bool(account.get('details_submitted')),
        'requirements': account.get('requirements'),
    }


def get_balance(account_id: str) -> dict:
    balance = _call('balance lookup', stripe.Balance.retrieve, stripe_account=account_id)
    return {
        'available': [{'amount': b['amount'], 'currency': b['currency']} for b in balance['available']],
        'pending': [{'amount': b['amount'], 'currency': b['currency']} for b in balance['pending']],
    }


# =============================================================================
# Payments
# =============================================================================

def create_checkout_session(
    *,
    amount: int,
    currency: str,
    product_name: str,
    description: str,
    customer_email: str,
    application_fee: int,
    destination: str,
    metadata: dict,
    success_url: str,
    cancel_url: str
) -> dict:
    session = _call(
        'checkout session',
        stripe.checkout.Session.create,
        mode='payment',
        payment_method_types=['card'],
        customer_email=customer_email,
        line_items=[{
            'price_data': {
                'currency': currency.lower(),
                'product_data': {'name': product_name, 'description': description},
                'unit_amount': amount,
            },
            'quantity': 1,
        }],
        payment_intent_data={
            'application_fee_amount': application_fee,
            'transfer_data': {'destination': destination},
            'metadata': metadata,
        },
        metadata=metadata,
        success_url=success_url,
        cancel_url=cancel_url,
    )
    return {'session_id': session['id'], 'url': session['url']}


def create_refund(payment_intent_id: str, amount: Optional[int] = None, reason: Optional[str] = None):
    params = {'payment_intent': payment_intent_id}
    if amount is not None:
        params['amount'] = amount
    if reason:
        params['reason'] = reason
    return _call('refund', stripe.Refund.create, **params)


def construct_event(payload: bytes, signature: str):
    """
    Verify a webhook payload against ``STRIPE_WEBHOOK_SECRET``.

    Raises:
        stripe.error.SignatureVerificationError: If the signature does not match
        ValueError: If the payload is not valid JSON
    """
    return stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
