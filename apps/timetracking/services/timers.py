"""
Live timers. A user has at most one running timer.
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.projects.models import Project, Milestone
from apps.timetracking.models import TimeEntry, EntryType

from .durations import calculate_duration, round_to_nearest
from .exceptions import (
    TimeEntryNotFoundError,
    TimeEntryProjectNotFoundError,
    TimerAlreadyRunningError,
    TimerNotRunningError,
    InvalidTimeEntryError,
)
from .tracking_settings import get_settings

logger = logging.getLogger(__name__)


def resolve_work_target(owner: User, project_id: Optional[UUID], milestone_id: Optional[UUID]) -> tuple:
    """
    Look up the project and milestone an entry is logged against.

    Returns:
        (project or None, milestone or None)
    """
    project = milestone = None
    if project_id:
        try:
            project = Project.objects.get(id=project_id, owner=owner)
        except Project.DoesNotExist:
            raise TimeEntryProjectNotFoundError("Project not found")
    if milestone_id:
        try:
            milestone = Milestone.objects.select_related('project').get(
                id=milestone_id,
                project__owner=owner
            )
        except Milestone.DoesNotExist:
            raise TimeEntryProjectNotFoundError("Milestone not found")
        if project and milestone.project_id != project.id:
            raise InvalidTimeEntryError("Milestone belongs to a different project")
        project = project or milestone.project
    return project, milestone


def get_running_timer(owner: User) -> Optional[TimeEntry]:
    return (
        TimeEntry.objects
        .select_related('project', 'milestone')
        .filter(owner=owner, end_time__isnull=True)
        .first()
    )


@transaction.atomic
def start_timer(
    *,
    owner: User,
    project_id: Optional[UUID] = None,
    milestone_id: Optional[UUID] = None,
    description: str = '',
    billable: bool = True
) -> TimeEntry:
    """
    Raises:
        TimerAlreadyRunningError: If the user already has a running timer
        InvalidTimeEntryError: If a description is required and missing
    """
    # Serialize timer starts per user
    User.objects.select_for_update().filter(pk=owner.pk).first()

    if TimeEntry.objects.filter(owner=owner, end_time__isnull=True).exists():
        raise TimerAlreadyRunningError(
            "You already have a timer running. Stop it before starting a new one."
        )

    settings = get_settings(owner)
    if settings.require_description and not description.strip():
        raise InvalidTimeEntryError("A description is required")

    project, milestone = resolve_work_target(owner, project_id, milestone_id)
    now = timezone.now()

    return TimeEntry.objects.create(
        owner=owner,
        project=project,
        milestone=milestone,
        description=description,
        start_time=now,
        billable=billable,
        hourly_rate=settings.default_hourly_rate,
        entry_type=EntryType.TRACKED,
        original_start_time=now,
    )


def _lock_entry(owner: User, entry_id: UUID) -> TimeEntry:
    try:
        return TimeEntry.objects.select_for_update().get(id=entry_id, owner=owner)
    except TimeEntry.DoesNotExist:
        raise TimeEntryNotFoundError("Time entry not found")


def finalize_duration(seconds: int, settings) -> int:
    """Apply rounding, then the minimum entry length."""
    seconds = round_to_nearest(seconds, settings.round_to_minutes)
    return max(seconds, (settings.minimum_entry_minutes or 1) * 60)


@transaction.atomic
def stop_timer(*, owner: User, entry_id: UUID, description: Optional[str] = None) -> TimeEntry:
    entry = _lock_entry(owner, entry_id)
    if entry.end_time is not None:
        raise TimerNotRunningError("Timer already stopped")

    settings = get_settings(owner)
    now = timezone.now()
    duration = finalize_duration(calculate_duration(entry.start_time, now), settings)

    entry.end_time = now
    entry.duration = duration
    entry.original_end_time = now
    entry.original_duration = duration
    if description:
        entry.description = description
    entry.save()
    return entry


@transaction.atomic
def discard_timer(*, owner: User, entry_id: UUID) -> None:
    entry = _lock_entry(owner, entry_id)
    if entry.end_time is not None:
        raise TimerNotRunningError("Cannot discard a stopped timer")
    entry.delete()


def auto_stop_timers(*, now=None) -> int:
    """
    Stop timers left running past midnight at the midnight that followed
    their start. Users who turned auto-stop off are skipped.

    Returns:
        Number of timers stopped
    """
    now = now or timezone.now()
    today_midnight = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)

    stale = (
        TimeEntry.objects
        .filter(end_time__isnull=True, start_time__lt=today_midnight)
        .exclude(owner__time_tracking_settings__auto_stop_at_midnight=False)
        .select_related('owner')
    )

    count = 0
    for entry in stale:
        with transaction.atomic():
            entry = TimeEntry.objects.select_for_update().get(id=entry.id)
            if entry.end_time is not None:
                continue

            started = timezone.localtime(entry.start_time)
            stop_at = started.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)

            duration = finalize_duration(
                calculate_duration(entry.start_time, stop_at),
                get_settings(entry.owner)
            )
            entry.end_time = stop_at
            entry.duration = duration
            entry.original_end_time = stop_at
            entry.original_duration = duration
            entry.auto_stopped = True
            entry.auto_stopped_reason = 'midnight'
            entry.save()
        count += 1
        logger.info("Auto-stopped timer %s for user %s at midnight", entry.id, entry.owner_id)

    return count
