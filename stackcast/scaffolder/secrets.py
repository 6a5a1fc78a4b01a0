"""Credential generation for rendered env files and config modules.

Every generator draws from the operating system CSPRNG and keeps no state,
so calls are safe from any thread or task.
"""

from __future__ import annotations

import base64
import secrets
import string

ALNUM_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

# Used verbatim when secure passwords are disabled, so preview runs are reproducible.
PLACEHOLDER_AUTH_SECRET = "your-super-secret-jwt-key-change-this-in-production"
PLACEHOLDER_SESSION_SECRET = "your-session-secret-change-this"
PLACEHOLDER_API_KEY = "your-api-key-change-this"


def hex_secret(length: int = 64) -> str:
    """*length* random bytes as lowercase hex (``2 * length`` characters)."""
    return secrets.token_bytes(length).hex()


def base64url_secret(length: int = 32) -> str:
    """*length* random bytes as unpadded URL-safe base64."""
    return base64.urlsafe_b64encode(secrets.token_bytes(length)).rstrip(b"=").decode("ascii")


def alnum_secret(length: int = 32) -> str:
    """*length* characters from ``[A-Za-z0-9]``.

    Each byte is reduced ``% 62``, which slightly favours the first eight
    characters of the alphabet. Fine for API-key style tokens; use rejection
    sampling if uniformity matters.
    """
    return "".join(ALNUM_ALPHABET[byte % len(ALNUM_ALPHABET)] for byte in secrets.token_bytes(length))
