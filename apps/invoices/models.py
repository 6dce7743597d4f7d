from decimal import Decimal

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
import uuid

from apps.common.money import Currency
from apps.common.tokens import generate_pay_token


class InvoiceStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    SENT = 'sent', 'Sent'
    VIEWED = 'viewed', 'Viewed'
    PARTIALLY_PAID = 'partially_paid', 'Partially Paid'
    PAID = 'paid', 'Paid'
    OVERDUE = 'overdue', 'Overdue'
    CANCELLED = 'cancelled', 'Cancelled'


# Invoices the client still owes money on
OUTSTANDING_STATUSES = (
    InvoiceStatus.SENT,
    InvoiceStatus.VIEWED,
    InvoiceStatus.PARTIALLY_PAID,
    InvoiceStatus.OVERDUE,
)


class PaymentMethod(models.TextChoices):
    STRIPE = 'stripe', 'Stripe'
    MANUAL = 'manual', 'Manual'
    BANK_TRANSFER = 'bank_transfer', 'Bank Transfer'
    CASH = 'cash', 'Cash'
    CHECK = 'check', 'Check'
    OTHER = 'other', 'Other'


class Invoice(models.Model):
    """
    An invoice to a client.

    ``line_items`` holds ``{id, description, quantity, unit_price, amount}``
    dicts; every money field is in cents of ``currency``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='invoices')
    client = models.ForeignKey('clients.Client', on_delete=models.PROTECT, related_name='invoices')
    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices'
    )
    milestone = models.ForeignKey(
        'projects.Milestone',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices'
    )

    invoice_number = models.CharField(max_length=30)
    status = models.CharField(max_length=20, choices=InvoiceStatus.choices, default=InvoiceStatus.DRAFT)

    line_items = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)
    subtotal = models.BigIntegerField(default=0)
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    tax = models.BigIntegerField(default=0)
    total = models.BigIntegerField(default=0)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)

    due_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)

    # Payment page
    pay_token = models.CharField(max_length=21, unique=True, db_index=True, editable=False)
    allow_partial_payments = models.BooleanField(default=False)
    minimum_payment = models.BigIntegerField(null=True, blank=True)

    # Lifecycle
    sent_at = models.DateTimeField(null=True, blank=True)
    viewed_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    last_reminder_at = models.DateTimeField(null=True, blank=True)
    paid_amount = models.BigIntegerField(default=0)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoices'
        constraints = [
            models.UniqueConstraint(fields=['owner', 'invoice_number'], name='unique_invoice_number_per_owner'),
        ]
        indexes = [
            models.Index(fields=['owner', 'status']),
            models.Index(fields=['owner', 'created_at']),
            models.Index(fields=['status', 'due_date']),
            models.Index(fields=['client']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.invoice_number} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        if not self.pay_token:
            self.pay_token = generate_pay_token()
        super().save(*args, **kwargs)

    @property
    def balance_due(self):
        return max(self.total - self.paid_amount, 0)

    @property
    def is_outstanding(self):
        return self.status in OUTSTANDING_STATUSES


class InvoicePayment(models.Model):
    """One payment towards an invoice. Stripe payments carry their intent id."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='payments')
    amount = models.BigIntegerField()
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.MANUAL)
    stripe_payment_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    paid_at = models.DateTimeField()
    note = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'invoice_payments'
        indexes = [
            models.Index(fields=['invoice', 'paid_at']),
            models.Index(fields=['paid_at']),
        ]
        ordering = ['paid_at']

    def __str__(self):
        return f"{self.amount} on {self.invoice.invoice_number}"
