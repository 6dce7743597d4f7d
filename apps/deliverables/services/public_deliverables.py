from typing import Optional
from uuid import UUID

from django.db.models import F
from django.utils import timezone

from apps.deliverables.file_types import get_extension, get_category, format_file_size
from apps.deliverables.models import Deliverable
from apps.projects.services import verify_portal_access

from .exceptions import DeliverableNotFoundError


def describe(deliverable: Deliverable) -> dict:
    """Extension, category and human-readable size for a deliverable."""
    return {
        'extension': get_extension(deliverable.file_name),
        'category': get_category(deliverable.file_name),
        'formatted_size': format_file_size(deliverable.file_size),
    }


def list_public_deliverables(*, public_id: str, password: Optional[str] = None) -> list:
    """
    Files shown on a client portal. The portal password applies.

    Raises:
        ProjectNotFoundError, PortalPasswordError
    """
    project = verify_portal_access(public_id=public_id, password=password)

    return [
        {
            'id': d.id,
            'file_name': d.file_name,
            'file_url': d.file_url,
            'file_size': d.file_size,
            'mime_type': d.mime_type,
            'version': d.version,
            'version_notes': d.version_notes,
            'github_url': d.github_url or None,
            'download_count': d.download_count,
            'created_at': d.created_at,
            'milestone': {'id': d.milestone.id, 'name': d.milestone.name} if d.milestone else None,
            **describe(d),
        }
        for d in Deliverable.objects.filter(project=project).select_related('milestone').order_by('-created_at')
    ]


def track_download(*, deliverable_id: UUID) -> str:
    """
    Count a client download.

    Returns:
        The file URL to redirect to
    """
    updated = Deliverable.objects.filter(id=deliverable_id).update(
        download_count=F('download_count') + 1,
        last_downloaded_at=timezone.now(),
    )
    if not updated:
        raise DeliverableNotFoundError("Deliverable not found")
    return Deliverable.objects.values_list('file_url', flat=True).get(id=deliverable_id)
