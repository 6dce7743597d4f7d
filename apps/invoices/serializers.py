from decimal import Decimal

from rest_framework import serializers

from apps.common.money import Currency
from .models import Invoice, InvoicePayment, InvoiceStatus, PaymentMethod


class LineItemSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(max_length=500)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    unit_price = serializers.IntegerField(min_value=0, help_text='Unit price in cents')
    amount = serializers.IntegerField(read_only=True)


class InvoiceClientSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    email = serializers.EmailField()
    company = serializers.CharField()


class InvoicePaymentSerializer(serializers.ModelSerializer):

    class Meta:
        model = InvoicePayment
        fields = ['id', 'amount', 'payment_method', 'stripe_payment_id', 'paid_at', 'note', 'created_at']
        read_only_fields = fields


class InvoiceListSerializer(serializers.ModelSerializer):
    client = InvoiceClientSerializer(read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)
    balance_due = serializers.IntegerField(read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'status',
            'client',
            'project',
            'project_name',
            'total',
            'paid_amount',
            'balance_due',
            'currency',
            'due_date',
            'sent_at',
            'paid_at',
            'created_at',
        ]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    """Full invoice for the owner."""

    client = InvoiceClientSerializer(read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)
    balance_due = serializers.IntegerField(read_only=True)
    payments = InvoicePaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'status',
            'client',
            'project',
            'project_name',
            'milestone',
            'line_items',
            'subtotal',
            'tax_rate',
            'tax',
            'total',
            'currency',
            'paid_amount',
            'balance_due',
            'payment_method',
            'due_date',
            'notes',
            'pay_token',
            'allow_partial_payments',
            'minimum_payment',
            'sent_at',
            'viewed_at',
            'paid_at',
            'last_reminder_at',
            'payments',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class InvoiceCreateSerializer(serializers.Serializer):
    client_id = serializers.UUIDField()
    project_id = serializers.UUIDField(required=False, allow_null=True)
    milestone_id = serializers.UUIDField(required=False, allow_null=True)
    line_items = LineItemSerializer(many=True, allow_empty=False)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0'), max_value=Decimal('100'), required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)
    allow_partial_payments = serializers.BooleanField(required=False)
    minimum_payment = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class InvoiceUpdateSerializer(serializers.Serializer):
    line_items = LineItemSerializer(many=True, allow_empty=False, required=False)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0'), max_value=Decimal('100'), required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)
    allow_partial_payments = serializers.BooleanField(required=False)
    minimum_payment = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class InvoiceFromMilestoneSerializer(serializers.Serializer):
    milestone_id = serializers.UUIDField()


class InvoiceFromTimeEntriesSerializer(serializers.Serializer):
    client_id = serializers.UUIDField()
    project_id = serializers.UUIDField(required=False, allow_null=True)
    entry_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0'), max_value=Decimal('100'), required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class MarkPaidSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1, required=False, help_text='Defaults to the balance due')
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.MANUAL)
    note = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    paid_at = serializers.DateTimeField(required=False)


class InvoiceFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=InvoiceStatus.choices, required=False)
    client = serializers.UUIDField(required=False)
    project = serializers.UUIDField(required=False)


class SendResultSerializer(serializers.Serializer):
    invoice = InvoiceSerializer()
    email_sent = serializers.BooleanField()


class NextNumberSerializer(serializers.Serializer):
    invoice_number = serializers.CharField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
