from django.contrib import admin
from django.utils.html import format_html

from .models import Client, ClientNote, ClientStatus


class ClientNoteInline(admin.TabularInline):
    model = ClientNote
    extra = 0
    fields = ['content', 'author', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'email', 'owner', 'status_badge', 'follow_up_date', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'email', 'company', 'owner__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ClientNoteInline]

    def status_badge(self, obj):
        """Display client status as colored badge."""
        colors = {
            ClientStatus.LEAD: ('#FEF3C7', '#92400E'),
            ClientStatus.ACTIVE: ('#16A34A', 'white'),
            ClientStatus.INACTIVE: ('#ccc', '#666'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'
