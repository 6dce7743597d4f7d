"""
S3-compatible object storage (AWS S3, Cloudflare R2, MinIO).

Browsers upload straight to the bucket with a presigned PUT URL; the API only
hands out URLs and keeps the resulting public URL/key on its records.
"""

import logging
import re
import time
from typing import Optional

import boto3
from botocore.config import Config
from django.conf import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[^a-zA-Z0-9.\-]')


class StorageError(Exception):
    """Raised when the storage provider rejects a request."""
    pass


def get_client():
    """Build a boto3 S3 client from settings."""
    return boto3.client(
        's3',
        endpoint_url=settings.STORAGE_ENDPOINT_URL or None,
        aws_access_key_id=settings.STORAGE_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.STORAGE_SECRET_ACCESS_KEY or None,
        region_name=settings.STORAGE_REGION,
        config=Config(signature_version='s3v4'),
    )


def sanitize_file_name(file_name: str) -> str:
    """Replace anything outside ``[a-zA-Z0-9.-]`` with an underscore."""
    return _UNSAFE_CHARS.sub('_', file_name)


def build_key(prefix: str, file_name: str, timestamp: Optional[int] = None) -> str:
    """
    Return ``{prefix}/{timestamp}-{sanitized name}``.

    The timestamp is milliseconds since the epoch so two uploads of the same
    file never collide.
    """
    ts = timestamp if timestamp is not None else int(time.time() * 1000)
    return f'{prefix.rstrip("/")}/{ts}-{sanitize_file_name(file_name)}'


def public_url(key: str) -> str:
    return f'{settings.STORAGE_PUBLIC_URL}/{key}'


def key_from_url(url: str) -> Optional[str]:
    """Return the object key for a URL that points into our bucket, else None."""
    base = f'{settings.STORAGE_PUBLIC_URL}/'
    if not url or not settings.STORAGE_PUBLIC_URL or not url.startswith(base):
        return None
    return url[len(base):] or None


def create_upload_url(*, key: str, content_type: str, expires_in: Optional[int] = None) -> dict:
    """
    Presign a PUT for ``key``.

    Returns:
        {'upload_url', 'file_url', 'key', 'expires_in'}
    """
    expires = expires_in or settings.STORAGE_UPLOAD_URL_EXPIRES
    try:
        upload_url = get_client().generate_presigned_url(
            'put_object',
            Params={
                'Bucket': settings.STORAGE_BUCKET,
                'Key': key,
                'ContentType': content_type,
            },
            ExpiresIn=expires,
        )
    except Exception as e:
        logger.error("Failed to presign upload for %s: %s", key, e)
        raise StorageError(f"Could not create upload URL: {e}") from e

    return {
        'upload_url': upload_url,
        'file_url': public_url(key),
        'key': key,
        'expires_in': expires,
    }


def delete_file(key: str) -> None:
    """Delete an object. Raises StorageError on provider failure."""
    try:
        get_client().delete_object(Bucket=settings.STORAGE_BUCKET, Key=key)
    except Exception as e:
        raise StorageError(f"Could not delete {key}: {e}") from e
    logger.info("Deleted storage object %s", key)
