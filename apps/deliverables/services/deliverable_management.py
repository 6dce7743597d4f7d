"""
Deliverable uploads, versions and repository links.
"""

import logging
from typing import Optional
from urllib.parse import urlparse
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import Max, QuerySet

from apps.accounts.models import User
from apps.common import storage
from apps.deliverables.models import Deliverable, GITHUB_MIME_TYPE
from apps.projects.models import Project, Milestone
from apps.projects.services import ProjectNotFoundError, MilestoneNotFoundError

from .exceptions import DeliverableNotFoundError, FileTooLargeError, InvalidGithubUrlError

logger = logging.getLogger(__name__)

GITHUB_HOSTS = ('github.com', 'www.github.com')


def _get_project(owner: User, project_id: UUID) -> Project:
    try:
        return Project.objects.get(id=project_id, owner=owner)
    except Project.DoesNotExist:
        raise ProjectNotFoundError("Project not found")


def _get_milestone(project: Project, milestone_id: Optional[UUID]) -> Optional[Milestone]:
    if not milestone_id:
        return None
    try:
        return Milestone.objects.get(id=milestone_id, project=project)
    except Milestone.DoesNotExist:
        raise MilestoneNotFoundError("Milestone not found")


def list_deliverables(
    *,
    owner: User,
    project_id: UUID,
    milestone_id: Optional[UUID] = None
) -> QuerySet[Deliverable]:
    project = _get_project(owner, project_id)
    queryset = Deliverable.objects.filter(project=project).select_related('milestone')
    if milestone_id:
        queryset = queryset.filter(milestone_id=milestone_id)
    return queryset.order_by('-created_at')


def get_deliverable(*, owner: User, deliverable_id: UUID) -> Deliverable:
    try:
        return (
            Deliverable.objects
            .select_related('project', 'milestone')
            .get(id=deliverable_id, project__owner=owner)
        )
    except Deliverable.DoesNotExist:
        raise DeliverableNotFoundError("Deliverable not found")


def get_versions(deliverable: Deliverable) -> QuerySet[Deliverable]:
    """Every version of the deliverable's file in its project, newest first."""
    return (
        Deliverable.objects
        .filter(project_id=deliverable.project_id, file_name=deliverable.file_name)
        .order_by('-version')
    )


def get_upload_url(
    *,
    owner: User,
    project_id: UUID,
    file_name: str,
    content_type: str,
    file_size: int
) -> dict:
    """
    Presign a direct upload into the project's folder.

    Raises:
        FileTooLargeError: If ``file_size`` exceeds the upload limit
        storage.StorageError: If the provider refuses to presign
    """
    project = _get_project(owner, project_id)

    max_bytes = settings.DELIVERABLE_MAX_UPLOAD_BYTES
    if file_size > max_bytes:
        raise FileTooLargeError(f"File size exceeds {max_bytes // (1024 * 1024)}MB limit")

    key = storage.build_key(f'deliverables/{project.id}', file_name)
    return storage.create_upload_url(key=key, content_type=content_type)


@transaction.atomic
def create_deliverable(
    *,
    owner: User,
    project_id: UUID,
    file_name: str,
    file_url: str,
    milestone_id: Optional[UUID] = None,
    file_key: str = '',
    file_size: Optional[int] = None,
    mime_type: str = '',
    version_notes: str = '',
    github_url: str = ''
) -> Deliverable:
    """
    Record an uploaded file. Re-using a file name within the project makes
    this the next version of that file.
    """
    project = _get_project(owner, project_id)
    milestone = _get_milestone(project, milestone_id)

    previous = (
        Deliverable.objects
        .select_for_update()
        .filter(project=project, file_name=file_name)
        .order_by('-version')
        .first()
    )

    return Deliverable.objects.create(
        project=project,
        milestone=milestone,
        uploaded_by=owner,
        previous_version=previous,
        file_name=file_name,
        file_url=file_url,
        file_key=file_key or storage.key_from_url(file_url) or '',
        file_size=file_size,
        mime_type=mime_type,
        version=previous.version + 1 if previous else 1,
        version_notes=version_notes,
        github_url=github_url,
    )


@transaction.atomic
def create_version(
    *,
    owner: User,
    previous_id: UUID,
    file_url: str,
    file_key: str = '',
    file_size: Optional[int] = None,
    mime_type: str = '',
    version_notes: str = ''
) -> Deliverable:
    """Upload a new version of an existing file; the name and milestone carry over."""
    previous = get_deliverable(owner=owner, deliverable_id=previous_id)

    latest = (
        Deliverable.objects
        .filter(project_id=previous.project_id, file_name=previous.file_name)
        .aggregate(latest=Max('version'))['latest'] or previous.version
    )

    return Deliverable.objects.create(
        project=previous.project,
        milestone=previous.milestone,
        uploaded_by=owner,
        previous_version=previous,
        file_name=previous.file_name,
        file_url=file_url,
        file_key=file_key or storage.key_from_url(file_url) or '',
        file_size=file_size,
        mime_type=mime_type,
        version=latest + 1,
        version_notes=version_notes,
        github_url=previous.github_url,
    )


def repository_name(github_url: str) -> str:
    """'https://github.com/acme/site/' -> 'acme/site'."""
    parts = [p for p in urlparse(github_url).path.split('/') if p]
    return '/'.join(parts[-2:])


def add_github_link(
    *,
    owner: User,
    project_id: UUID,
    github_url: str,
    name: Optional[str] = None
) -> Deliverable:
    """
    Raises:
        InvalidGithubUrlError: If the URL is not a github.com repository URL
    """
    project = _get_project(owner, project_id)

    parsed = urlparse(github_url)
    if parsed.scheme not in ('http', 'https') or parsed.netloc.lower() not in GITHUB_HOSTS:
        raise InvalidGithubUrlError("Only github.com repository URLs are supported")
    repo = repository_name(github_url)
    if '/' not in repo:
        raise InvalidGithubUrlError("URL must point to a repository (github.com/owner/repo)")

    return Deliverable.objects.create(
        project=project,
        uploaded_by=owner,
        file_name=name or repo,
        file_url=github_url,
        mime_type=GITHUB_MIME_TYPE,
        version=1,
        github_url=github_url,
    )


def update_deliverable(*, owner: User, deliverable_id: UUID, **changes) -> Deliverable:
    deliverable = get_deliverable(owner=owner, deliverable_id=deliverable_id)

    if 'version_notes' in changes:
        deliverable.version_notes = changes['version_notes'] or ''
    if 'milestone_id' in changes:
        deliverable.milestone = _get_milestone(deliverable.project, changes['milestone_id'])
    if 'github_url' in changes:
        deliverable.github_url = changes['github_url'] or ''

    deliverable.save()
    return deliverable


def delete_deliverable(*, owner: User, deliverable_id: UUID) -> None:
    """
    Delete the record and its stored file. GitHub links have no file. A
    storage failure is logged and does not block the deletion.
    """
    deliverable = get_deliverable(owner=owner, deliverable_id=deliverable_id)

    key = None
    if not deliverable.is_github_link:
        key = deliverable.file_key or storage.key_from_url(deliverable.file_url)

    deliverable.delete()

    if key:
        try:
            storage.delete_file(key)
        except storage.StorageError as e:
            logger.error("Failed to delete deliverable file %s: %s", key, e)
