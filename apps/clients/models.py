from django.db import models
from django.utils import timezone
import uuid


class ClientStatus(models.TextChoices):
    LEAD = 'lead', 'Lead'
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'


class Client(models.Model):
    """A customer of the freelancer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='clients')
    name = models.CharField(max_length=200)
    email = models.EmailField(max_length=255)
    company = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=ClientStatus.choices, default=ClientStatus.LEAD)

    # Follow-up reminder
    follow_up_date = models.DateField(null=True, blank=True)
    follow_up_note = models.CharField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clients'
        indexes = [
            models.Index(fields=['owner', 'status']),
            models.Index(fields=['owner', 'follow_up_date']),
            models.Index(fields=['owner', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.company})" if self.company else self.name

    @property
    def follow_up_overdue(self):
        return bool(self.follow_up_date and self.follow_up_date < timezone.localdate())


class ClientNote(models.Model):
    """Timestamped note in a client's history."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='client_notes')
    author = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='client_notes')
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'client_notes'
        ordering = ['-created_at']

    def __str__(self):
        return f"Note on {self.client.name}"
