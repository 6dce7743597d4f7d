"""
Invoice arithmetic.

Line amounts and tax are rounded half-up to whole cents. Amounts sent by
callers are ignored: ``amount`` is always recomputed from quantity and unit
price.
"""

import uuid
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from apps.common.money import round_cents
from apps.invoices.models import InvoiceStatus

from .exceptions import InvalidLineItemsError


def _to_decimal(value, field: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidLineItemsError(f"Invalid {field}: {value!r}")


def build_line_items(items: Iterable[dict]) -> list:
    """
    Normalize raw line items.

    Raises:
        InvalidLineItemsError: If the list is empty or a line is invalid
    """
    normalized = []
    for item in items:
        description = (item.get('description') or '').strip()
        if not description:
            raise InvalidLineItemsError("Every line item needs a description")

        quantity = _to_decimal(item.get('quantity', 1), 'quantity')
        unit_price = _to_decimal(item.get('unit_price', 0), 'unit_price')
        if quantity <= 0:
            raise InvalidLineItemsError("Quantity must be greater than zero")
        if unit_price < 0:
            raise InvalidLineItemsError("Unit price cannot be negative")

        normalized.append({
            'id': str(item.get('id') or uuid.uuid4().hex),
            'description': description,
            'quantity': float(quantity),
            'unit_price': int(unit_price),
            'amount': round_cents(quantity * int(unit_price)),
        })

    if not normalized:
        raise InvalidLineItemsError("An invoice needs at least one line item")

    return normalized


def calculate_totals(line_items: list, tax_rate) -> dict:
    """
    Returns:
        {'subtotal': int, 'tax': int, 'total': int}
    """
    subtotal = sum(int(item['amount']) for item in line_items)
    rate = _to_decimal(tax_rate or 0, 'tax_rate')
    tax = round_cents(Decimal(subtotal) * rate / Decimal('100'))
    return {'subtotal': subtotal, 'tax': tax, 'total': subtotal + tax}


def derive_payment_status(total: int, paid_amount: int, current: Optional[str] = None) -> str:
    """
    Status implied by how much has been paid.

    ``current`` is returned unchanged while nothing has been paid.
    """
    if paid_amount >= total and paid_amount > 0:
        return InvoiceStatus.PAID
    if paid_amount > 0:
        return InvoiceStatus.PARTIALLY_PAID
    return current or InvoiceStatus.DRAFT
