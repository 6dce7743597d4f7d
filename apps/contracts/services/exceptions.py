"""
Domain-specific exceptions for contracts app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ContractsServiceError(Exception):
    """Base exception for all contract service errors."""
    pass


class ContractNotFoundError(ContractsServiceError):
    """Raised when a contract does not exist or belongs to another user."""
    pass


class ContractNotEditableError(ContractsServiceError):
    """Raised when editing or deleting a contract whose status forbids it."""
    pass


class InvalidContractStateError(ContractsServiceError):
    """Raised when an action is not allowed in the contract's current status."""
    pass


class ContractExpiredError(ContractsServiceError):
    """Raised when a client opens or signs a contract past its expiry."""
    pass


class ContractAlreadySignedError(ContractsServiceError):
    """Raised when signing or declining a contract that is already signed."""
    pass


class TermsNotAcceptedError(ContractsServiceError):
    """Raised when a signature is submitted without agreeing to the terms."""
    pass


class TemplateNotFoundError(ContractsServiceError):
    """Raised when a template does not exist or is not visible to the user."""
    pass


class SystemTemplateError(ContractsServiceError):
    """Raised when modifying or deleting a built-in template."""
    pass
