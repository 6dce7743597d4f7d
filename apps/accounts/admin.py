# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User


def _badge(label, background, color='white'):
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        background, color, label
    )


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin interface for freelancer accounts.

    Shows business profile and Stripe Connect state next to the usual
    permission fields.
    """

    list_display = [
        'email',
        'name',
        'business_name',
        'currency',
        'stripe_badge',
        'is_active_badge',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'is_active',
        'is_staff',
        'stripe_connected',
        'currency',
        'created_at',
    ]

    search_fields = [
        'email',
        'name',
        'business_name',
        'stripe_account_id',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'name', 'password')
        }),
        ('Business', {
            'fields': ('business_name', 'business_address', 'tax_id', 'logo_url', 'currency'),
        }),
        ('Stripe', {
            'fields': ('stripe_account_id', 'stripe_connected'),
        }),
        ('Email Preferences', {
            'fields': ('email_invoice_paid', 'email_contract_signed', 'email_weekly_digest'),
            'classes': ('collapse',),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'name', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'updated_at', 'last_login']

    filter_horizontal = ['groups', 'user_permissions']

    def stripe_badge(self, obj):
        """Display Stripe Connect state as colored badge."""
        if obj.stripe_connected:
            return _badge('Connected', '#16A34A')
        if obj.stripe_account_id:
            return _badge('Onboarding', '#F59E0B', '#1F2937')
        return _badge('Not connected', '#ccc', '#666')
    stripe_badge.short_description = 'Stripe'
    stripe_badge.admin_order_field = 'stripe_connected'

    def is_active_badge(self, obj):
        """Display active status as colored badge."""
        if obj.is_active:
            return _badge('Active', '#16A34A')
        return _badge('Inactive', '#DC2626')
    is_active_badge.short_description = 'Status'
    is_active_badge.admin_order_field = 'is_active'

    @admin.action(description='Clear Stripe connection')
    def clear_stripe(self, request, queryset):
        count = queryset.update(stripe_account_id=None, stripe_connected=False)
        self.message_user(request, f'Cleared Stripe connection for {count} user(s).')

    actions = ['clear_stripe']
