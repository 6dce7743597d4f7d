from django.contrib import admin

from .file_types import format_file_size
from .models import Deliverable


@admin.register(Deliverable)
class DeliverableAdmin(admin.ModelAdmin):
    list_display = ['file_name', 'version', 'project', 'size_display', 'mime_type', 'download_count', 'created_at']
    list_filter = ['mime_type', 'created_at']
    search_fields = ['file_name', 'project__name', 'file_key']
    readonly_fields = ['file_key', 'download_count', 'last_downloaded_at', 'created_at', 'updated_at']

    def size_display(self, obj):
        return format_file_size(obj.file_size) or '-'
    size_display.short_description = 'Size'
    size_display.admin_order_field = 'file_size'
