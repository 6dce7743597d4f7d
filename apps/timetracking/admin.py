from django.contrib import admin
from django.utils.html import format_html

from .models import TimeEntry, TimeTrackingSettings, EntryType
from .services import format_duration


@admin.register(TimeEntry)
class TimeEntryAdmin(admin.ModelAdmin):
    list_display = [
        'description', 'owner', 'project', 'start_time', 'duration_display',
        'type_badge', 'billable', 'locked_badge'
    ]
    list_filter = ['entry_type', 'billable', 'auto_stopped', 'start_time']
    search_fields = ['description', 'owner__email', 'project__name']
    readonly_fields = [
        'edit_history', 'original_start_time', 'original_end_time',
        'original_duration', 'created_at', 'updated_at'
    ]
    date_hierarchy = 'start_time'

    def duration_display(self, obj):
        if obj.end_time is None:
            return format_html('<span style="color: #2563EB;">{}</span>', 'running')
        return format_duration(obj.duration)
    duration_display.short_description = 'Duration'
    duration_display.admin_order_field = 'duration'

    def type_badge(self, obj):
        if obj.entry_type == EntryType.MANUAL:
            return format_html(
                '<span style="background: #F59E0B; color: #1F2937; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">{}</span>',
                'Manual'
            )
        return format_html(
            '<span style="background: #ccc; color: #666; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            'Tracked'
        )
    type_badge.short_description = 'Type'

    def locked_badge(self, obj):
        if obj.locked_at:
            return format_html('<span style="color: #7C3AED;">{}</span>', obj.locked_reason or 'locked')
        return '-'
    locked_badge.short_description = 'Locked'


@admin.register(TimeTrackingSettings)
class TimeTrackingSettingsAdmin(admin.ModelAdmin):
    list_display = [
        'user', 'default_hourly_rate', 'max_retroactive_days', 'round_to_minutes',
        'client_visible_logs', 'auto_stop_at_midnight'
    ]
    list_filter = ['client_visible_logs', 'auto_stop_at_midnight', 'allow_overlapping']
    search_fields = ['user__email']
