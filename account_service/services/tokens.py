"""Opaque single-use tokens for email verification and password recovery."""

import secrets
from datetime import datetime, timedelta, timezone

DEFAULT_TOKEN_BYTES = 32
EMAIL_VERIFICATION_TTL = timedelta(hours=24)
PASSWORD_RESET_TTL = timedelta(minutes=10)


def generate_token(byte_length: int = DEFAULT_TOKEN_BYTES) -> str:
    """Return ``byte_length`` bytes from the OS CSPRNG, hex encoded."""
    if byte_length <= 0:
        raise ValueError("byte_length must be positive")
    return secrets.token_hex(byte_length)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def expiry_after(duration: timedelta) -> datetime:
    """Absolute expiry instant ``duration`` from the current wall-clock time."""
    return utcnow() + duration
