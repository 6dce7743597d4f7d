from django.contrib import admin
from django.utils.html import format_html

from apps.common.money import format_money
from .models import Project, Milestone, ProjectStatus, MilestoneStatus

PROJECT_COLORS = {
    ProjectStatus.DRAFT: ('#ccc', '#666'),
    ProjectStatus.ACTIVE: ('#2563EB', 'white'),
    ProjectStatus.ON_HOLD: ('#F59E0B', '#1F2937'),
    ProjectStatus.COMPLETED: ('#16A34A', 'white'),
    ProjectStatus.CANCELLED: ('#DC2626', 'white'),
}

MILESTONE_COLORS = {
    MilestoneStatus.PENDING: ('#ccc', '#666'),
    MilestoneStatus.IN_PROGRESS: ('#2563EB', 'white'),
    MilestoneStatus.COMPLETED: ('#0D9488', 'white'),
    MilestoneStatus.INVOICED: ('#7C3AED', 'white'),
    MilestoneStatus.PAID: ('#16A34A', 'white'),
}


def _status_badge(obj, colors):
    bg, fg = colors.get(obj.status, ('#ccc', '#666'))
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        bg, fg, obj.get_status_display()
    )


class MilestoneInline(admin.TabularInline):
    model = Milestone
    extra = 0
    fields = ['order', 'name', 'amount', 'due_date', 'status', 'completed_at']
    readonly_fields = ['completed_at']
    ordering = ['order']


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'client', 'owner', 'status_badge', 'total_display', 'start_date', 'end_date']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'client__name', 'owner__email', 'public_id']
    readonly_fields = ['public_id', 'total_amount', 'created_at', 'updated_at']
    inlines = [MilestoneInline]

    def status_badge(self, obj):
        return _status_badge(obj, PROJECT_COLORS)
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def total_display(self, obj):
        return format_money(obj.total_amount, obj.owner.currency)
    total_display.short_description = 'Total'
    total_display.admin_order_field = 'total_amount'


@admin.register(Milestone)
class MilestoneAdmin(admin.ModelAdmin):
    list_display = ['name', 'project', 'amount', 'due_date', 'status_badge', 'order']
    list_filter = ['status', 'due_date']
    search_fields = ['name', 'project__name']
    readonly_fields = ['completed_at', 'created_at', 'updated_at']

    def status_badge(self, obj):
        return _status_badge(obj, MILESTONE_COLORS)
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'
