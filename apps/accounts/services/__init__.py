"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidLogoError,
)
from .user_registration import register_user, authenticate_user
from .business_settings import (
    update_business_settings,
    update_notification_preferences,
    get_logo_upload_url,
    update_logo,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'InvalidLogoError',
    # Services
    'register_user',
    'authenticate_user',
    'update_business_settings',
    'update_notification_preferences',
    'get_logo_upload_url',
    'update_logo',
]
