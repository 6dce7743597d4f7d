"""
Project management service.

Project totals are kept equal to the sum of milestone amounts; every service
that adds, removes or re-prices a milestone adjusts the total in the same
transaction.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from django.contrib.auth.hashers import make_password
from django.db import transaction
from django.db.models import QuerySet, Prefetch

from apps.accounts.models import User
from apps.clients.models import Client
from apps.clients.services import activate_lead, ClientNotFoundError
from apps.projects.models import Project, Milestone, ProjectStatus

from .exceptions import ProjectNotFoundError

EDITABLE_FIELDS = ('name', 'description', 'status', 'start_date', 'end_date')


def list_projects(
    *,
    owner: User,
    status: Optional[str] = None,
    client_id: Optional[UUID] = None
) -> QuerySet[Project]:
    queryset = Project.objects.filter(owner=owner).select_related('client')

    if status:
        queryset = queryset.filter(status=status)

    if client_id:
        queryset = queryset.filter(client_id=client_id)

    return queryset.prefetch_related('milestones').order_by('-created_at')


def get_project(*, owner: User, project_id: UUID) -> Project:
    """
    Raises:
        ProjectNotFoundError: If the project does not exist for this owner
    """
    try:
        return (
            Project.objects
            .select_related('client')
            .prefetch_related(Prefetch('milestones', queryset=Milestone.objects.order_by('order')))
            .get(id=project_id, owner=owner)
        )
    except Project.DoesNotExist:
        raise ProjectNotFoundError("Project not found")


@transaction.atomic
def create_project(
    *,
    owner: User,
    client_id: UUID,
    name: str,
    description: str = '',
    status: str = ProjectStatus.DRAFT,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    public_password: str = '',
    milestones: Optional[list] = None
) -> Project:
    """
    Create a project, optionally with milestones in the given order.

    A lead client is promoted to active.

    Raises:
        ClientNotFoundError: If the client is not owned by ``owner``
    """
    try:
        client = Client.objects.select_for_update().get(id=client_id, owner=owner)
    except Client.DoesNotExist:
        raise ClientNotFoundError("Client not found")

    project = Project.objects.create(
        owner=owner,
        client=client,
        name=name,
        description=description,
        status=status,
        start_date=start_date,
        end_date=end_date,
        public_password=make_password(public_password) if public_password else '',
    )

    total = 0
    for index, data in enumerate(milestones or []):
        milestone = Milestone.objects.create(
            project=project,
            name=data['name'],
            description=data.get('description', ''),
            amount=data.get('amount', 0),
            due_date=data.get('due_date'),
            order=index,
        )
        total += milestone.amount

    if total:
        project.total_amount = total
        project.save(update_fields=['total_amount'])

    activate_lead(client)

    return project


@transaction.atomic
def update_project(*, owner: User, project_id: UUID, **changes) -> Project:
    """
    Update project fields. ``public_password`` set to '' removes the portal
    password; None leaves it untouched.
    """
    try:
        project = Project.objects.select_for_update().get(id=project_id, owner=owner)
    except Project.DoesNotExist:
        raise ProjectNotFoundError("Project not found")

    update_fields = []
    for field in EDITABLE_FIELDS:
        if field in changes:
            setattr(project, field, changes[field])
            update_fields.append(field)

    if changes.get('public_password') is not None:
        password = changes['public_password']
        project.public_password = make_password(password) if password else ''
        update_fields.append('public_password')

    if update_fields:
        project.save(update_fields=update_fields + ['updated_at'])

    return get_project(owner=owner, project_id=project.id)


@transaction.atomic
def delete_project(*, owner: User, project_id: UUID) -> None:
    try:
        project = Project.objects.get(id=project_id, owner=owner)
    except Project.DoesNotExist:
        raise ProjectNotFoundError("Project not found")
    project.delete()
