"""
Clients app services layer.

Services contain business logic and orchestrate operations across models.
"""

from .exceptions import (
    ClientsServiceError,
    ClientNotFoundError,
    ClientHasDependentsError,
    ClientNoteNotFoundError,
    InvalidFollowUpError,
)

from .client_management import (
    list_clients,
    get_client,
    create_client,
    update_client,
    delete_client,
    get_status_counts,
    activate_lead,
    list_notes,
    add_note,
    delete_note,
)

from .follow_ups import (
    set_follow_up,
    complete_follow_up,
    snooze_follow_up,
    get_upcoming_follow_ups,
)

from .payment_behavior import (
    calculate_payment_behavior,
    rate_average_days,
)


__all__ = [
    # Exceptions
    'ClientsServiceError',
    'ClientNotFoundError',
    'ClientHasDependentsError',
    'ClientNoteNotFoundError',
    'InvalidFollowUpError',

    # Client Management
    'list_clients',
    'get_client',
    'create_client',
    'update_client',
    'delete_client',
    'get_status_counts',
    'activate_lead',

    # Notes
    'list_notes',
    'add_note',
    'delete_note',

    # Follow-ups
    'set_follow_up',
    'complete_follow_up',
    'snooze_follow_up',
    'get_upcoming_follow_ups',

    # Payment Behavior
    'calculate_payment_behavior',
    'rate_average_days',
]
