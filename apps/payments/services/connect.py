"""Stripe Connect onboarding and account status for freelancers."""

import logging
from typing import Optional

from django.conf import settings

from apps.accounts.models import User
from apps.payments import stripe_client
from apps.payments.stripe_client import PaymentProviderError

from .exceptions import StripeNotConnectedError

logger = logging.getLogger(__name__)


def _disconnected(account_id: Optional[str] = None, error: Optional[str] = None) -> dict:
    status = {
        'connected': False,
        'account_id': account_id,
        'charges_enabled': False,
        'payouts_enabled': False,
        'details_submitted': False,
    }
    if error:
        status['error'] = error
    return status


def get_connect_status(user: User) -> dict:
    """
    Current Connect status, refreshed from Stripe.

    The local ``stripe_connected`` flag is updated when Stripe reports a
    different state. Provider failures are reported in the payload.
    """
    if not user.stripe_account_id:
        return _disconnected()

    try:
        account = stripe_client.get_account_status(user.stripe_account_id)
    except PaymentProviderError:
        logger.warning("Could not fetch Stripe status for user %s", user.id)
        return _disconnected(user.stripe_account_id, error='Failed to fetch Stripe status')

    connected = account['charges_enabled'] and account['payouts_enabled']
    if user.stripe_connected != connected:
        user.stripe_connected = connected
        user.save(update_fields=['stripe_connected', 'updated_at'])

    return {
        'connected': connected,
        'account_id': account['id'],
        'charges_enabled': account['charges_enabled'],
        'payouts_enabled': account['payouts_enabled'],
        'details_submitted': account['details_submitted'],
        'requirements': account['requirements'],
    }


def get_onboarding_link(user: User) -> str:
    """Create the Express account on first use, then return an onboarding URL."""
    if not user.stripe_account_id:
        account = stripe_client.create_connect_account(
            user_id=user.id,
            email=user.email,
            business_name=user.business_name,
        )
        user.stripe_account_id = account['id']
        user.save(update_fields=['stripe_account_id', 'updated_at'])
        logger.info("Created Stripe account %s for user %s", user.stripe_account_id, user.id)

    base = f'{settings.APP_URL}/dashboard/settings?tab=payments'
    return stripe_client.create_onboarding_link(
        user.stripe_account_id,
        return_url=f'{base}&stripe=success',
        refresh_url=f'{base}&stripe=refresh',
    )


def get_dashboard_link(user: User) -> str:
    if not user.stripe_account_id:
        raise StripeNotConnectedError("Stripe account not connected")
    return stripe_client.create_dashboard_link(user.stripe_account_id)


def get_balance(user: User) -> Optional[dict]:
    """Available and pending balance, or None when payments are not set up."""
    if not user.stripe_account_id or not user.stripe_connected:
        return None
    try:
        return stripe_client.get_balance(user.stripe_account_id)
    except PaymentProviderError:
        logger.warning("Could not fetch Stripe balance for user %s", user.id)
        return None


def disconnect(user: User) -> None:
    """Forget the connected account locally. The Stripe account is left untouched."""
    user.stripe_account_id = None
    user.stripe_connected = False
    user.save(update_fields=['stripe_account_id', 'stripe_connected', 'updated_at'])
    logger.info("User %s disconnected Stripe", user.id)


def create_refund(*, payment_intent_id: str, amount: Optional[int] = None, reason: Optional[str] = None):
    return stripe_client.create_refund(payment_intent_id, amount=amount, reason=reason)
