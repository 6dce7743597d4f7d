"""
Deliverables app services layer.

Files live in object storage; the database keeps their URL, key and
version chain.
"""

from .exceptions import (
    DeliverablesServiceError,
    DeliverableNotFoundError,
    FileTooLargeError,
    InvalidGithubUrlError,
)

from .deliverable_management import (
    list_deliverables,
    get_deliverable,
    get_versions,
    get_upload_url,
    create_deliverable,
    create_version,
    repository_name,
    add_github_link,
    update_deliverable,
    delete_deliverable,
)

from .public_deliverables import (
    describe,
    list_public_deliverables,
    track_download,
)


__all__ = [
    # Exceptions
    'DeliverablesServiceError',
    'DeliverableNotFoundError',
    'FileTooLargeError',
    'InvalidGithubUrlError',

    # Management
    'list_deliverables',
    'get_deliverable',
    'get_versions',
    'get_upload_url',
    'create_deliverable',
    'create_version',
    'repository_name',
    'add_github_link',
    'update_deliverable',
    'delete_deliverable',

    # Public
    'describe',
    'list_public_deliverables',
    'track_download',
]
