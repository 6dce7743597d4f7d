from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
import uuid


class EntryType(models.TextChoices):
    TRACKED = 'tracked', 'Tracked'
    MANUAL = 'manual', 'Manual'


class TimeEntry(models.Model):
    """
    A block of work time.

    Running timers have no ``end_time``. Entries billed on an invoice are
    locked and keep an audit trail of every edit in ``edit_history``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='time_entries')
    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='time_entries'
    )
    milestone = models.ForeignKey(
        'projects.Milestone',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='time_entries'
    )
    invoice = models.ForeignKey(
        'invoices.Invoice',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='time_entries'
    )

    description = models.TextField(blank=True)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    # Seconds, set when the timer stops
    duration = models.PositiveIntegerField(null=True, blank=True)

    billable = models.BooleanField(default=True)
    # Cents per hour, snapshot at creation
    hourly_rate = models.PositiveIntegerField(null=True, blank=True)
    entry_type = models.CharField(max_length=10, choices=EntryType.choices, default=EntryType.TRACKED)

    # Integrity
    locked_at = models.DateTimeField(null=True, blank=True)
    locked_reason = models.CharField(max_length=50, blank=True)
    edit_history = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)
    auto_stopped = models.BooleanField(default=False)
    auto_stopped_reason = models.CharField(max_length=50, blank=True)
    original_start_time = models.DateTimeField(null=True, blank=True)
    original_end_time = models.DateTimeField(null=True, blank=True)
    original_duration = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'time_entries'
        indexes = [
            models.Index(fields=['owner', 'start_time']),
            models.Index(fields=['owner', 'end_time']),
            models.Index(fields=['project']),
            models.Index(fields=['invoice']),
        ]
        ordering = ['-start_time']
        verbose_name_plural = 'Time entries'

    def __str__(self):
        return f"{self.description or 'Time entry'} ({self.start_time:%Y-%m-%d})"

    @property
    def is_running(self):
        return self.end_time is None

    @property
    def is_locked(self):
        return self.locked_at is not None

    @property
    def is_manual(self):
        return self.entry_type == EntryType.MANUAL


class TimeTrackingSettings(models.Model):
    """Per-user time tracking preferences and integrity rules."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='time_tracking_settings'
    )
    default_hourly_rate = models.PositiveIntegerField(null=True, blank=True)
    max_retroactive_days = models.PositiveIntegerField(default=7)
    # Minutes per day before a manual entry carries a warning
    daily_hour_warning = models.PositiveIntegerField(default=720)
    idle_timeout_minutes = models.PositiveIntegerField(default=30)
    round_to_minutes = models.PositiveIntegerField(default=0)
    minimum_entry_minutes = models.PositiveIntegerField(default=1)
    allow_overlapping = models.BooleanField(default=False)
    client_visible_logs = models.BooleanField(default=True)
    require_description = models.BooleanField(default=False)
    auto_stop_at_midnight = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'time_tracking_settings'
        verbose_name_plural = 'Time tracking settings'

    def __str__(self):
        return f"Time tracking settings for {self.user}"
