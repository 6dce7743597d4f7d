"""Sequential invoice numbers per freelancer: INV-0001, INV-0002, ..."""

from apps.accounts.models import User
from apps.invoices.models import Invoice

PREFIX = 'INV-'


def format_invoice_number(sequence: int) -> str:
    return f'{PREFIX}{sequence:04d}'


def next_invoice_number(owner: User) -> str:
    """
    Next free number after the owner's invoice count. Numbers taken by
    earlier renames or deletions are skipped.
    """
    sequence = Invoice.objects.filter(owner=owner).count() + 1
    taken = set(
        Invoice.objects.filter(owner=owner, invoice_number__startswith=PREFIX)
        .values_list('invoice_number', flat=True)
    )
    while format_invoice_number(sequence) in taken:
        sequence += 1
    return format_invoice_number(sequence)
