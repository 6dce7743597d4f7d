"""
Payment behavior scoring.

A client's rating is derived from how long, on average, their fully paid
invoices took between being sent and being paid.
"""

from typing import Optional

from apps.clients.models import Client
from apps.invoices.models import InvoiceStatus

EXCELLENT = 'excellent'
GOOD = 'good'
SLOW = 'slow'
POOR = 'poor'
NEW = 'new'

# (upper bound in days, rating), checked in order
THRESHOLDS = (
    (7, EXCELLENT),
    (14, GOOD),
    (30, SLOW),
)

SECONDS_PER_DAY = 86400


def rate_average_days(average_days: Optional[float]) -> str:
    """Map an average days-to-pay onto a rating. None means no history."""
    if average_days is None:
        return NEW
    for limit, rating in THRESHOLDS:
        if average_days <= limit:
            return rating
    return POOR


def calculate_payment_behavior(client: Client) -> dict:
    """
    Returns:
        {'rating': str, 'average_days': float | None, 'paid_invoice_count': int}
    """
    timestamps = client.invoices.filter(
        status=InvoiceStatus.PAID,
        sent_at__isnull=False,
        paid_at__isnull=False,
    ).values_list('sent_at', 'paid_at')

    durations = [
        max((paid_at - sent_at).total_seconds(), 0) / SECONDS_PER_DAY
        for sent_at, paid_at in timestamps
    ]

    if not durations:
        return {'rating': NEW, 'average_days': None, 'paid_invoice_count': 0}

    average = sum(durations) / len(durations)
    return {
        'rating': rate_average_days(average),
        'average_days': round(average, 1),
        'paid_invoice_count': len(durations),
    }
