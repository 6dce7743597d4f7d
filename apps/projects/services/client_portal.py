"""
Client portal.

A read-only view of a project reachable by its public id, optionally guarded
by a password. Amounts on milestones and internal notes never leave here.
"""

from typing import Optional

from django.contrib.auth.hashers import check_password

from apps.deliverables.file_types import get_extension, get_category, format_file_size
from apps.deliverables.models import Deliverable
from apps.invoices.models import Invoice, InvoiceStatus
from apps.notifications.emails import pay_url
from apps.projects.models import Project
from apps.timetracking.services import get_public_time_logs

from .exceptions import ProjectNotFoundError, PortalPasswordError

HIDDEN_INVOICE_STATUSES = (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED)


def verify_portal_access(*, public_id: str, password: Optional[str] = None) -> Project:
    """
    Resolve a portal link.

    Raises:
        ProjectNotFoundError: If no project has this public id
        PortalPasswordError: If the project is password protected and the
            password is missing or wrong
    """
    try:
        project = Project.objects.select_related('client', 'owner').get(public_id=public_id)
    except Project.DoesNotExist:
        raise ProjectNotFoundError("Project not found")

    if project.public_password and not (password and check_password(password, project.public_password)):
        raise PortalPasswordError("Password required" if not password else "Incorrect password")

    return project


def get_public_project(*, public_id: str, password: Optional[str] = None) -> dict:
    project = verify_portal_access(public_id=public_id, password=password)

    milestones = [
        {
            'id': m.id,
            'name': m.name,
            'description': m.description,
            'status': m.status,
            'due_date': m.due_date,
            'completed_at': m.completed_at,
            'order': m.order,
        }
        for m in project.milestones.order_by('order', 'created_at')
    ]

    invoices = [
        {
            'id': invoice.id,
            'invoice_number': invoice.invoice_number,
            'status': invoice.status,
            'total': invoice.total,
            'paid_amount': invoice.paid_amount,
            'balance_due': invoice.balance_due,
            'currency': invoice.currency,
            'due_date': invoice.due_date,
            'pay_url': pay_url(invoice),
        }
        for invoice in Invoice.objects.filter(project=project)
        .exclude(status__in=HIDDEN_INVOICE_STATUSES)
        .order_by('-created_at')
    ]

    deliverables = [
        {
            'id': d.id,
            'file_name': d.file_name,
            'file_url': d.file_url,
            'file_size': d.file_size,
            'formatted_size': format_file_size(d.file_size),
            'extension': get_extension(d.file_name),
            'category': get_category(d.file_name),
            'mime_type': d.mime_type,
            'version': d.version,
            'version_notes': d.version_notes,
            'github_url': d.github_url or None,
            'created_at': d.created_at,
        }
        for d in Deliverable.objects.filter(project=project).order_by('-created_at')
    ]

    return {
        'project': {
            'id': project.id,
            'name': project.name,
            'description': project.description,
            'status': project.status,
            'start_date': project.start_date,
            'end_date': project.end_date,
            'client': {
                'name': project.client.name,
                'company': project.client.company or None,
            },
        },
        'milestones': milestones,
        'invoices': invoices,
        'deliverables': deliverables,
        'time_logs': get_public_time_logs(project=project),
        'business': project.owner.business_info(),
    }
