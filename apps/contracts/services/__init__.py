"""
Contracts app services layer.

Services contain business logic and orchestrate operations across models.
"""

from .exceptions import (
    ContractsServiceError,
    ContractNotFoundError,
    ContractNotEditableError,
    InvalidContractStateError,
    ContractExpiredError,
    ContractAlreadySignedError,
    TermsNotAcceptedError,
    TemplateNotFoundError,
    SystemTemplateError,
)

from .variables import (
    default_variables,
    substitute,
    milestones_text,
)

from .contract_management import (
    list_contracts,
    get_contract,
    create_contract,
    create_from_template,
    update_contract,
    delete_contract,
    developer_sign,
    send_contract,
    send_reminder,
    list_reminders,
    expire_contracts,
)

from .public_contracts import (
    get_contract_by_token,
    get_public_contract,
    sign_contract,
    decline_contract,
    get_signed_contract_by_token,
)

from .template_management import (
    list_templates,
    get_template,
    create_template,
    update_template,
    duplicate_template,
    delete_template,
    set_default_template,
    seed_system_templates,
)


__all__ = [
    # Exceptions
    'ContractsServiceError',
    'ContractNotFoundError',
    'ContractNotEditableError',
    'InvalidContractStateError',
    'ContractExpiredError',
    'ContractAlreadySignedError',
    'TermsNotAcceptedError',
    'TemplateNotFoundError',
    'SystemTemplateError',

    # Variables
    'default_variables',
    'substitute',
    'milestones_text',

    # Contract Management
    'list_contracts',
    'get_contract',
    'create_contract',
    'create_from_template',
    'update_contract',
    'delete_contract',
    'developer_sign',
    'send_contract',
    'send_reminder',
    'list_reminders',
    'expire_contracts',

    # Public
    'get_contract_by_token',
    'get_public_contract',
    'sign_contract',
    'decline_contract',
    'get_signed_contract_by_token',

    # Templates
    'list_templates',
    'get_template',
    'create_template',
    'update_template',
    'duplicate_template',
    'delete_template',
    'set_default_template',
    'seed_system_templates',
]
