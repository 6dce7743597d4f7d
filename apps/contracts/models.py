from django.db import models
from django.db.models import Q
import uuid

from apps.common.tokens import generate_sign_token


class ContractStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    SENT = 'sent', 'Sent'
    VIEWED = 'viewed', 'Viewed'
    SIGNED = 'signed', 'Signed'
    DECLINED = 'declined', 'Declined'
    EXPIRED = 'expired', 'Expired'


# Contracts waiting on the client
OPEN_STATUSES = (ContractStatus.SENT, ContractStatus.VIEWED)


class Contract(models.Model):
    """
    An agreement sent to a client for e-signature.

    ``content`` is Markdown. The client signature is either a drawn image
    as a data URL or a typed name; the signing IP and user agent are kept
    as the audit trail.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='contracts')
    client = models.ForeignKey('clients.Client', on_delete=models.CASCADE, related_name='contracts')
    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contracts'
    )
    template = models.ForeignKey(
        'contracts.Template',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contracts'
    )

    name = models.CharField(max_length=200)
    content = models.TextField()
    status = models.CharField(max_length=20, choices=ContractStatus.choices, default=ContractStatus.DRAFT)
    sign_token = models.CharField(max_length=21, unique=True, db_index=True, editable=False)

    sent_at = models.DateTimeField(null=True, blank=True)
    viewed_at = models.DateTimeField(null=True, blank=True)
    signed_at = models.DateTimeField(null=True, blank=True)
    declined_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    decline_reason = models.TextField(blank=True)

    # Client signature and audit trail
    client_signature = models.TextField(blank=True)
    client_signed_name = models.CharField(max_length=200, blank=True)
    client_signed_email = models.EmailField(max_length=255, blank=True)
    client_ip = models.GenericIPAddressField(null=True, blank=True)
    client_user_agent = models.CharField(max_length=500, blank=True)

    # Developer signature
    developer_signature = models.TextField(blank=True)
    developer_signed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contracts'
        indexes = [
            models.Index(fields=['owner', 'status']),
            models.Index(fields=['status', 'expires_at']),
            models.Index(fields=['client']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        if not self.sign_token:
            self.sign_token = generate_sign_token()
        super().save(*args, **kwargs)

    @property
    def is_open(self):
        return self.status in OPEN_STATUSES


class ReminderType(models.TextChoices):
    MANUAL = 'manual', 'Manual'
    AUTO_3DAY = 'auto_3day', 'Automatic (3 days)'
    AUTO_7DAY = 'auto_7day', 'Automatic (7 days)'
    AUTO_EXPIRING = 'auto_expiring', 'Automatic (expiring)'


class ContractReminder(models.Model):
    """A signing reminder emailed to the client."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    contract = models.ForeignKey(Contract, on_delete=models.CASCADE, related_name='reminders')
    reminder_type = models.CharField(max_length=20, choices=ReminderType.choices, default=ReminderType.MANUAL)
    custom_message = models.TextField(blank=True)
    sent_to_email = models.EmailField(max_length=255)
    sent_to_name = models.CharField(max_length=200)
    sent_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'contract_reminders'
        ordering = ['-sent_at']

    def __str__(self):
        return f"Reminder for {self.contract.name} to {self.sent_to_email}"


class TemplateType(models.TextChoices):
    CONTRACT = 'contract', 'Contract'
    INVOICE = 'invoice', 'Invoice'


class Template(models.Model):
    """
    Reusable document body with ``{{ variable }}`` placeholders.

    System templates have no owner and are visible to every user.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='templates'
    )
    type = models.CharField(max_length=20, choices=TemplateType.choices)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    content = models.TextField()
    is_default = models.BooleanField(default=False)
    is_system = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'templates'
        constraints = [
            models.UniqueConstraint(
                fields=['owner', 'type'],
                condition=Q(is_default=True, owner__isnull=False),
                name='unique_default_template_per_owner_and_type'
            ),
        ]
        indexes = [
            models.Index(fields=['owner', 'type']),
        ]
        ordering = ['-is_system', '-created_at']

    def __str__(self):
        return self.name
