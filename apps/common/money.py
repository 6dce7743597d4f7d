"""
Money helpers.

All amounts are stored as integer minor units (cents). Derived amounts are
rounded half-up to the nearest cent.
"""

from decimal import Decimal, ROUND_HALF_UP

from django.db import models


class Currency(models.TextChoices):
    USD = 'USD', 'US Dollar'
    EUR = 'EUR', 'Euro'
    GBP = 'GBP', 'British Pound'
    SGD = 'SGD', 'Singapore Dollar'
    AUD = 'AUD', 'Australian Dollar'
    CAD = 'CAD', 'Canadian Dollar'


CURRENCY_SYMBOLS = {
    Currency.USD: '$',
    Currency.EUR: '€',
    Currency.GBP: '£',
    Currency.SGD: 'S$',
    Currency.AUD: 'A$',
    Currency.CAD: 'C$',
}


def round_cents(value) -> int:
    """Round a Decimal/number of cents half-up to an int."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def percentage_of(amount: int, percent) -> int:
    """Return ``percent`` % of ``amount`` cents, rounded half-up."""
    return round_cents(Decimal(amount) * Decimal(str(percent)) / Decimal('100'))


def format_money(amount: int, currency: str = Currency.USD) -> str:
    """
    Format cents for display.

    >>> format_money(123456, 'USD')
    '$1,234.56'
    """
    symbol = CURRENCY_SYMBOLS.get(currency, f'{currency} ')
    value = (Decimal(amount or 0) / Decimal('100')).quantize(Decimal('0.01'))
    sign = '-' if value < 0 else ''
    return f'{sign}{symbol}{abs(value):,.2f}'
