"""Business profile, logo and notification preference services."""

import logging
from typing import Optional

from django.contrib.auth import get_user_model

from apps.common import storage

from .exceptions import InvalidLogoError

logger = logging.getLogger(__name__)

User = get_user_model()

BUSINESS_FIELDS = ('name', 'business_name', 'business_address', 'tax_id', 'currency')
PREFERENCE_FIELDS = ('email_invoice_paid', 'email_contract_signed', 'email_weekly_digest')


def update_business_settings(*, user: User, **changes) -> User:
    """Apply the given business profile fields; unknown keys are ignored."""
    update_fields = []
    for field in BUSINESS_FIELDS:
        if field in changes and changes[field] is not None:
            setattr(user, field, changes[field])
            update_fields.append(field)

    if update_fields:
        user.save(update_fields=update_fields + ['updated_at'])
    return user


def update_notification_preferences(*, user: User, **changes) -> User:
    update_fields = [f for f in PREFERENCE_FIELDS if f in changes]
    for field in update_fields:
        setattr(user, field, bool(changes[field]))
    if update_fields:
        user.save(update_fields=update_fields + ['updated_at'])
    return user


def get_logo_upload_url(*, user: User, file_name: str, content_type: str) -> dict:
    """
    Presign an upload for a new business logo.

    Raises:
        InvalidLogoError: If content_type is not an image type
    """
    if not content_type.startswith('image/'):
        raise InvalidLogoError("Logo must be an image file")

    key = storage.build_key(f'logos/{user.id}', file_name)
    return storage.create_upload_url(key=key, content_type=content_type)


def update_logo(*, user: User, logo_url: Optional[str]) -> User:
    """
    Point the profile at a new logo (or clear it) and remove the old file.

    Removing the previous object is best effort; a storage failure is logged
    and the profile change still goes through.
    """
    old_key = storage.key_from_url(user.logo_url)

    user.logo_url = logo_url or ''
    user.save(update_fields=['logo_url', 'updated_at'])

    if old_key and storage.key_from_url(user.logo_url) != old_key:
        try:
            storage.delete_file(old_key)
        except storage.StorageError as e:
            logger.warning("Failed to delete old logo for user %s: %s", user.id, e)

    return user
