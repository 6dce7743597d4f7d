from django.db import models
from django.db.models import Max
import uuid

from apps.common.tokens import generate_public_id


class ProjectStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    ACTIVE = 'active', 'Active'
    ON_HOLD = 'on_hold', 'On Hold'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class MilestoneStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in_progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'
    INVOICED = 'invoiced', 'Invoiced'
    PAID = 'paid', 'Paid'


class Project(models.Model):
    """A piece of work for one client, split into billable milestones."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='projects')
    client = models.ForeignKey('clients.Client', on_delete=models.PROTECT, related_name='projects')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=ProjectStatus.choices, default=ProjectStatus.DRAFT)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)

    # Sum of milestone amounts, in cents
    total_amount = models.BigIntegerField(default=0)

    # Client portal
    public_id = models.CharField(max_length=10, unique=True, db_index=True, editable=False)
    public_password = models.CharField(max_length=128, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'projects'
        indexes = [
            models.Index(fields=['owner', 'status']),
            models.Index(fields=['owner', 'updated_at']),
            models.Index(fields=['client']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.public_id:
            self.public_id = generate_public_id()
        super().save(*args, **kwargs)

    def next_milestone_order(self):
        current = self.milestones.aggregate(m=Max('order'))['m']
        return 0 if current is None else current + 1


class Milestone(models.Model):
    """Billable phase of a project."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='milestones')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    amount = models.BigIntegerField(default=0)
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=MilestoneStatus.choices, default=MilestoneStatus.PENDING)
    completed_at = models.DateTimeField(null=True, blank=True)
    order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'milestones'
        indexes = [
            models.Index(fields=['project', 'order']),
            models.Index(fields=['status', 'due_date']),
        ]
        ordering = ['order', 'created_at']

    def __str__(self):
        return f"{self.project.name} - {self.name}"

    @property
    def is_billed(self):
        """Invoiced or paid milestones are frozen."""
        return self.status in (MilestoneStatus.INVOICED, MilestoneStatus.PAID)
