"""Random public identifiers used in client-facing links."""

import secrets
import string

URL_SAFE_ALPHABET = string.ascii_letters + string.digits + '_-'

PUBLIC_ID_LENGTH = 10
PAY_TOKEN_LENGTH = 21
SIGN_TOKEN_LENGTH = 21


def generate_token(length: int = PAY_TOKEN_LENGTH) -> str:
    """Return a URL-safe random token of ``length`` characters."""
    return ''.join(secrets.choice(URL_SAFE_ALPHABET) for _ in range(length))


def generate_public_id() -> str:
    return generate_token(PUBLIC_ID_LENGTH)


def generate_pay_token() -> str:
    return generate_token(PAY_TOKEN_LENGTH)


def generate_sign_token() -> str:
    return generate_token(SIGN_TOKEN_LENGTH)
