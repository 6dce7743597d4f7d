"""
Projects app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    ProjectsServiceError,
    ProjectNotFoundError,
    MilestoneNotFoundError,
    MilestoneLockedError,
    PortalPasswordError,
)

from .project_management import (
    list_projects,
    get_project,
    create_project,
    update_project,
    delete_project,
)

from .milestone_management import (
    list_milestones,
    get_milestone,
    create_milestone,
    update_milestone,
    update_milestone_status,
    delete_milestone,
    reorder_milestones,
    mark_milestone_invoiced,
    mark_milestone_paid,
    reset_milestone_to_completed,
    send_milestone_reminders,
)

from .client_portal import (
    verify_portal_access,
    get_public_project,
)


__all__ = [
    # Exceptions
    'ProjectsServiceError',
    'ProjectNotFoundError',
    'MilestoneNotFoundError',
    'MilestoneLockedError',
    'PortalPasswordError',

    # Project Management
    'list_projects',
    'get_project',
    'create_project',
    'update_project',
    'delete_project',

    # Milestone Management
    'list_milestones',
    'get_milestone',
    'create_milestone',
    'update_milestone',
    'update_milestone_status',
    'delete_milestone',
    'reorder_milestones',
    'mark_milestone_invoiced',
    'mark_milestone_paid',
    'reset_milestone_to_completed',
    'send_milestone_reminders',

    # Client Portal
    'verify_portal_access',
    'get_public_project',
]
