from rest_framework import serializers

from .models import TimeEntry, TimeTrackingSettings
from .services import format_duration


class TimeEntrySerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)
    milestone_name = serializers.CharField(source='milestone.name', read_only=True, default=None)
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True, default=None)
    formatted_duration = serializers.SerializerMethodField()
    is_running = serializers.BooleanField(read_only=True)
    is_locked = serializers.BooleanField(read_only=True)
    is_manual = serializers.BooleanField(read_only=True)
    has_been_edited = serializers.SerializerMethodField()

    class Meta:
        model = TimeEntry
        fields = [
            'id',
            'project',
            'project_name',
            'milestone',
            'milestone_name',
            'invoice',
            'invoice_number',
            'description',
            'start_time',
            'end_time',
            'duration',
            'formatted_duration',
            'billable',
            'hourly_rate',
            'entry_type',
            'is_running',
            'is_locked',
            'is_manual',
            'has_been_edited',
            'locked_at',
            'locked_reason',
            'edit_history',
            'auto_stopped',
            'auto_stopped_reason',
            'original_start_time',
            'original_end_time',
            'original_duration',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_formatted_duration(self, obj):
        return format_duration(obj.duration) if obj.duration else None

    def get_has_been_edited(self, obj):
        return bool(obj.edit_history)


class RunningTimerSerializer(TimeEntrySerializer):
    current_duration = serializers.IntegerField(read_only=True)

    class Meta(TimeEntrySerializer.Meta):
        fields = TimeEntrySerializer.Meta.fields + ['current_duration']
        read_only_fields = fields


class StartTimerSerializer(serializers.Serializer):
    project_id = serializers.UUIDField(required=False, allow_null=True)
    milestone_id = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    billable = serializers.BooleanField(default=True)


class StopTimerSerializer(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True)


class ManualEntrySerializer(serializers.Serializer):
    project_id = serializers.UUIDField(required=False, allow_null=True)
    milestone_id = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField()
    date = serializers.DateField()
    duration = serializers.IntegerField(min_value=60, help_text='Seconds')
    billable = serializers.BooleanField(default=True)
    hourly_rate = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class TimeEntryUpdateSerializer(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True)
    project_id = serializers.UUIDField(required=False, allow_null=True)
    milestone_id = serializers.UUIDField(required=False, allow_null=True)
    duration = serializers.IntegerField(min_value=60, required=False)
    billable = serializers.BooleanField(required=False)
    hourly_rate = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    edit_reason = serializers.CharField(required=False, allow_blank=True)


class TimeEntryFilterSerializer(serializers.Serializer):
    project = serializers.UUIDField(required=False)
    milestone = serializers.UUIDField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    billable = serializers.BooleanField(required=False, allow_null=True, default=None)
    invoiced = serializers.BooleanField(required=False, allow_null=True, default=None)


class TimesheetQuerySerializer(serializers.Serializer):
    week_start = serializers.DateField()


class StatsQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, data):
        if data['end_date'] < data['start_date']:
            raise serializers.ValidationError({'end_date': 'End date must be after start date.'})
        return data


class UninvoicedQuerySerializer(serializers.Serializer):
    project = serializers.UUIDField(required=False)
    client = serializers.UUIDField(required=False)


class MarkInvoicedSerializer(serializers.Serializer):
    entry_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    invoice_id = serializers.UUIDField()


class TimeTrackingSettingsSerializer(serializers.ModelSerializer):

    class Meta:
        model = TimeTrackingSettings
        fields = [
            'default_hourly_rate',
            'max_retroactive_days',
            'daily_hour_warning',
            'idle_timeout_minutes',
            'round_to_minutes',
            'minimum_entry_minutes',
            'allow_overlapping',
            'client_visible_logs',
            'require_description',
            'auto_stop_at_midnight',
            'updated_at',
        ]
        read_only_fields = ['updated_at']
        extra_kwargs = {
            'default_hourly_rate': {'min_value': 0},
            'max_retroactive_days': {'min_value': 0, 'max_value': 365},
            'daily_hour_warning': {'min_value': 60, 'max_value': 1440},
            'idle_timeout_minutes': {'min_value': 0, 'max_value': 120},
            'round_to_minutes': {'min_value': 0, 'max_value': 60},
            'minimum_entry_minutes': {'min_value': 1, 'max_value': 30},
        }


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
