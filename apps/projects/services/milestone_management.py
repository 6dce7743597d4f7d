"""Milestone management service."""

from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import F, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.notifications.services import notify_milestone_due_soon, notify_milestone_overdue
from apps.projects.models import Project, Milestone, MilestoneStatus

from .exceptions import (
    ProjectNotFoundError,
    MilestoneNotFoundError,
    MilestoneLockedError,
)

LOCKED_FIELDS = ('name', 'description', 'amount')

# Milestones still being worked on
OPEN_STATUSES = (MilestoneStatus.PENDING, MilestoneStatus.IN_PROGRESS)

DUE_SOON_DAYS = 3


def _lock_project(owner: User, project_id: UUID) -> Project:
    try:
        return Project.objects.select_for_update().get(id=project_id, owner=owner)
    except Project.DoesNotExist:
        raise ProjectNotFoundError("Project not found")


def _lock_milestone(owner: User, milestone_id: UUID) -> Milestone:
    try:
        return (
            Milestone.objects
            .select_for_update()
            .select_related('project')
            .get(id=milestone_id, project__owner=owner)
        )
    except Milestone.DoesNotExist:
        raise MilestoneNotFoundError("Milestone not found")


def _adjust_total(project: Project, delta: int) -> None:
    if delta:
        Project.objects.filter(id=project.id).update(total_amount=F('total_amount') + delta)
        project.refresh_from_db(fields=['total_amount'])
        if project.total_amount < 0:
            project.total_amount = 0
            project.save(update_fields=['total_amount'])


def list_milestones(*, owner: User, project_id: UUID) -> QuerySet[Milestone]:
    if not Project.objects.filter(id=project_id, owner=owner).exists():
        raise ProjectNotFoundError("Project not found")
    return Milestone.objects.filter(project_id=project_id).order_by('order', 'created_at')


def get_milestone(*, owner: User, milestone_id: UUID) -> Milestone:
    try:
        return Milestone.objects.select_related('project').get(id=milestone_id, project__owner=owner)
    except Milestone.DoesNotExist:
        raise MilestoneNotFoundError("Milestone not found")


@transaction.atomic
def create_milestone(
    *,
    owner: User,
    project_id: UUID,
    name: str,
    amount: int = 0,
    description: str = '',
    due_date: Optional[date] = None
) -> Milestone:
    """Append a milestone to the end of the project and add to its total."""
    project = _lock_project(owner, project_id)

    milestone = Milestone.objects.create(
        project=project,
        name=name,
        description=description,
        amount=amount,
        due_date=due_date,
        order=project.next_milestone_order(),
    )
    _adjust_total(project, amount)
    return milestone


@transaction.atomic
def update_milestone(*, owner: User, milestone_id: UUID, **changes) -> Milestone:
    """
    Update milestone details.

    Raises:
        MilestoneLockedError: If name/description/amount change on an
            invoiced or paid milestone
    """
    milestone = _lock_milestone(owner, milestone_id)

    touches_locked = any(
        field in changes and changes[field] != getattr(milestone, field)
        for field in LOCKED_FIELDS
    )
    if milestone.is_billed and touches_locked:
        raise MilestoneLockedError("Cannot edit an invoiced or paid milestone")

    old_amount = milestone.amount
    update_fields = []
    for field in ('name', 'description', 'amount', 'due_date'):
        if field in changes:
            setattr(milestone, field, changes[field])
            update_fields.append(field)

    if update_fields:
        milestone.save(update_fields=update_fields + ['updated_at'])
        _adjust_total(milestone.project, milestone.amount - old_amount)

    if 'status' in changes and changes['status'] != milestone.status:
        milestone = update_milestone_status(
            owner=owner,
            milestone_id=milestone.id,
            status=changes['status'],
        )

    return milestone


@transaction.atomic
def update_milestone_status(*, owner: User, milestone_id: UUID, status: str) -> Milestone:
    """
    Move a milestone to ``status``.

    Entering ``completed`` stamps completed_at; going back to pending or
    in progress clears it.

    Raises:
        MilestoneLockedError: If the milestone is already paid
    """
    milestone = _lock_milestone(owner, milestone_id)

    if milestone.status == MilestoneStatus.PAID and status != MilestoneStatus.PAID:
        raise MilestoneLockedError("Cannot change the status of a paid milestone")

    if status == MilestoneStatus.COMPLETED and milestone.status != MilestoneStatus.COMPLETED:
        milestone.completed_at = timezone.now()
    elif status in (MilestoneStatus.PENDING, MilestoneStatus.IN_PROGRESS):
        milestone.completed_at = None

    milestone.status = status
    milestone.save(update_fields=['status', 'completed_at', 'updated_at'])
    return milestone


@transaction.atomic
def delete_milestone(*, owner: User, milestone_id: UUID) -> None:
    """
    Raises:
        MilestoneLockedError: If the milestone has been invoiced or paid
    """
    milestone = _lock_milestone(owner, milestone_id)
    if milestone.is_billed:
        raise MilestoneLockedError("Cannot delete an invoiced or paid milestone")

    project = milestone.project
    amount = milestone.amount
    milestone.delete()
    _adjust_total(project, -amount)


@transaction.atomic
def reorder_milestones(*, owner: User, project_id: UUID, milestone_ids: list) -> QuerySet[Milestone]:
    """
    Set ``order`` from the position of each id in ``milestone_ids``. Ids that
    do not belong to the project are ignored.
    """
    project = _lock_project(owner, project_id)

    milestones = {str(m.id): m for m in project.milestones.all()}
    for position, milestone_id in enumerate(milestone_ids):
        milestone = milestones.get(str(milestone_id))
        if milestone is not None and milestone.order != position:
            milestone.order = position
            milestone.save(update_fields=['order', 'updated_at'])

    return Milestone.objects.filter(project=project).order_by('order', 'created_at')


def mark_milestone_invoiced(milestone: Milestone) -> None:
    """Called by invoicing when a milestone is billed."""
    milestone.status = MilestoneStatus.INVOICED
    milestone.save(update_fields=['status', 'updated_at'])


def mark_milestone_paid(milestone: Milestone) -> None:
    milestone.status = MilestoneStatus.PAID
    milestone.save(update_fields=['status', 'updated_at'])


def reset_milestone_to_completed(milestone: Milestone) -> None:
    """Called when the invoice that billed a milestone is deleted."""
    milestone.status = MilestoneStatus.COMPLETED
    if milestone.completed_at is None:
        milestone.completed_at = timezone.now()
    milestone.save(update_fields=['status', 'completed_at', 'updated_at'])


def send_milestone_reminders(*, today: Optional[date] = None, due_soon_days: int = DUE_SOON_DAYS) -> dict:
    """
    Notify owners about open milestones due in exactly ``due_soon_days``
    days, and about those whose due date was yesterday.

    Each milestone is matched on a single day per kind, so a daily run
    notifies once.

    Returns:
        {'due_soon': int, 'overdue': int}
    """
    today = today or timezone.localdate()
    open_milestones = (
        Milestone.objects
        .filter(status__in=OPEN_STATUSES)
        .select_related('project', 'project__owner')
    )

    due_soon = open_milestones.filter(due_date=today + timedelta(days=due_soon_days))
    for milestone in due_soon:
        notify_milestone_due_soon(milestone=milestone)

    overdue = open_milestones.filter(due_date=today - timedelta(days=1))
    for milestone in overdue:
        notify_milestone_overdue(milestone=milestone)

    return {'due_soon': len(due_soon), 'overdue': len(overdue)}
