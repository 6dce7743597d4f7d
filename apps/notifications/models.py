from django.db import models
from django.utils import timezone
import uuid


class NotificationType(models.TextChoices):
    INVOICE_PAID = 'invoice_paid', 'Invoice Paid'
    INVOICE_PARTIALLY_PAID = 'invoice_partially_paid', 'Invoice Partially Paid'
    INVOICE_VIEWED = 'invoice_viewed', 'Invoice Viewed'
    INVOICE_OVERDUE = 'invoice_overdue', 'Invoice Overdue'
    PAYMENT_REMINDER_SENT = 'payment_reminder_sent', 'Payment Reminder Sent'
    PAYMENT_FAILED = 'payment_failed', 'Payment Failed'
    CONTRACT_SIGNED = 'contract_signed', 'Contract Signed'
    CONTRACT_DECLINED = 'contract_declined', 'Contract Declined'
    CONTRACT_VIEWED = 'contract_viewed', 'Contract Viewed'
    CONTRACT_REMINDER_SENT = 'contract_reminder_sent', 'Contract Reminder Sent'
    MILESTONE_DUE_SOON = 'milestone_due_soon', 'Milestone Due Soon'
    MILESTONE_OVERDUE = 'milestone_overdue', 'Milestone Overdue'
    NEW_CLIENT = 'new_client', 'New Client'
    WELCOME = 'welcome', 'Welcome'
    STRIPE_CONNECTED = 'stripe_connected', 'Stripe Connected'


class Notification(models.Model):
    """In-app notification shown in the dashboard bell."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=40, choices=NotificationType.choices)
    title = models.CharField(max_length=200)
    message = models.TextField()

    # What the notification points at, e.g. ('invoice', <uuid>)
    resource_type = models.CharField(max_length=30, blank=True)
    resource_id = models.UUIDField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['user', 'read', 'created_at']),
            models.Index(fields=['user', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.email}: {self.title}"

    def mark_read(self):
        if not self.read:
            self.read = True
            self.read_at = timezone.now()
            self.save(update_fields=['read', 'read_at'])
