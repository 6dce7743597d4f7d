from django.contrib import admin
from django.utils.html import format_html

from apps.common.money import format_money
from .models import Invoice, InvoicePayment, InvoiceStatus

STATUS_COLORS = {
    InvoiceStatus.DRAFT: ('#ccc', '#666'),
    InvoiceStatus.SENT: ('#2563EB', 'white'),
    InvoiceStatus.VIEWED: ('#0891B2', 'white'),
    InvoiceStatus.PARTIALLY_PAID: ('#F59E0B', '#1F2937'),
    InvoiceStatus.PAID: ('#16A34A', 'white'),
    InvoiceStatus.OVERDUE: ('#DC2626', 'white'),
    InvoiceStatus.CANCELLED: ('#6B7280', 'white'),
}


class InvoicePaymentInline(admin.TabularInline):
    model = InvoicePayment
    extra = 0
    fields = ['amount', 'payment_method', 'stripe_payment_id', 'paid_at', 'note']
    readonly_fields = ['stripe_payment_id']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = [
        'invoice_number', 'client', 'owner', 'status_badge',
        'total_display', 'balance_display', 'due_date', 'created_at'
    ]
    list_filter = ['status', 'currency', 'allow_partial_payments', 'created_at']
    search_fields = ['invoice_number', 'client__name', 'client__email', 'owner__email', 'pay_token']
    readonly_fields = [
        'pay_token', 'subtotal', 'tax', 'total', 'paid_amount',
        'sent_at', 'viewed_at', 'paid_at', 'last_reminder_at', 'created_at', 'updated_at'
    ]
    inlines = [InvoicePaymentInline]
    date_hierarchy = 'created_at'

    def status_badge(self, obj):
        bg, fg = STATUS_COLORS.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def total_display(self, obj):
        return format_money(obj.total, obj.currency)
    total_display.short_description = 'Total'
    total_display.admin_order_field = 'total'

    def balance_display(self, obj):
        return format_money(obj.balance_due, obj.currency)
    balance_display.short_description = 'Balance'


@admin.register(InvoicePayment)
class InvoicePaymentAdmin(admin.ModelAdmin):
    list_display = ['invoice', 'amount_display', 'payment_method', 'stripe_payment_id', 'paid_at']
    list_filter = ['payment_method', 'paid_at']
    search_fields = ['invoice__invoice_number', 'stripe_payment_id']
    readonly_fields = ['created_at']

    def amount_display(self, obj):
        return format_money(obj.amount, obj.invoice.currency)
    amount_display.short_description = 'Amount'
    amount_display.admin_order_field = 'amount'
