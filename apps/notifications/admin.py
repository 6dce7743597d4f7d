from django.contrib import admin
from django.utils.html import format_html

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'type', 'read_badge', 'created_at']
    list_filter = ['type', 'read', 'created_at']
    search_fields = ['title', 'message', 'user__email']
    readonly_fields = ['created_at', 'read_at']
    ordering = ['-created_at']

    def read_badge(self, obj):
        """Display read state as colored badge."""
        if obj.read:
            return format_html(
                '<span style="background: #ccc; color: #666; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Read</span>'
            )
        return format_html(
            '<span style="background: #2563EB; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Unread</span>'
        )
    read_badge.short_description = 'Status'
    read_badge.admin_order_field = 'read'
