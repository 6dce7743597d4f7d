from django.contrib import admin
from django.utils.html import format_html

from .models import Contract, ContractReminder, ContractStatus, Template

STATUS_COLORS = {
    ContractStatus.DRAFT: ('#ccc', '#666'),
    ContractStatus.SENT: ('#2563EB', 'white'),
    ContractStatus.VIEWED: ('#0891B2', 'white'),
    ContractStatus.SIGNED: ('#16A34A', 'white'),
    ContractStatus.DECLINED: ('#DC2626', 'white'),
    ContractStatus.EXPIRED: ('#6B7280', 'white'),
}


class ContractReminderInline(admin.TabularInline):
    model = ContractReminder
    extra = 0
    fields = ['reminder_type', 'sent_to_email', 'custom_message', 'sent_at']
    readonly_fields = fields


@admin.register(Contract)
class ContractAdmin(admin.ModelAdmin):
    list_display = ['name', 'client', 'owner', 'status_badge', 'sent_at', 'signed_at', 'expires_at']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'client__name', 'client__email', 'owner__email', 'sign_token']
    readonly_fields = [
        'sign_token', 'sent_at', 'viewed_at', 'signed_at', 'declined_at',
        'client_signed_name', 'client_signed_email', 'client_ip', 'client_user_agent',
        'developer_signed_at', 'created_at', 'updated_at'
    ]
    inlines = [ContractReminderInline]
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


@admin.register(Template)
class TemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'owner', 'is_default', 'is_system', 'created_at']
    list_filter = ['type', 'is_system', 'is_default']
    search_fields = ['name', 'description', 'owner__email']
