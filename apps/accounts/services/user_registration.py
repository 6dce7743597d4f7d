"""User registration and authentication services."""

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.notifications.services import notify_welcome

from .exceptions import UserRegistrationError, InvalidCredentialsError, InactiveAccountError

User = get_user_model()


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    name: str = ""
) -> User:
    """
    Register a new freelancer account.

    Raises:
        UserRegistrationError: If the email is taken
    """
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("An account with this email already exists")

    try:
        user = User.objects.create_user(email=email, password=password, name=name)
    except IntegrityError as e:
        raise UserRegistrationError(f"Registration failed: {str(e)}")

    notify_welcome(user=user)
    return user


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Authenticate user with email and password.

    Uses select_for_update() to prevent race conditions when updating last_login.

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveAccountError: If account is deactivated
    """
    try:
        user = User.objects.select_for_update().get(email__iexact=email)
    except User.DoesNotExist:
        raise InvalidCredentialsError("Invalid email or password")

    if not user.check_password(password):
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    return user
