"""Password hashing and bearer token helpers."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from clinical_capacity.core.config import Settings, get_settings

_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    # bcrypt ignores everything past 72 bytes and newer releases reject it.
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    """Return a salted bcrypt hash suitable for ``users.hashed_password``."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("ascii")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare ``plain_password`` against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("ascii"))
    except (ValueError, TypeError, UnicodeEncodeError):
        return False


def _token_lifetime(settings: Settings, expires_delta: timedelta | None) -> timedelta:
    if expires_delta is not None:
        return expires_delta
    return timedelta(minutes=settings.access_token_expire_minutes)


def create_access_token(
    subject: str, expires_delta: timedelta | None = None, **claims: Any
) -> str:
    """Sign a JWT for ``subject``; extra keyword arguments become claims."""
    settings = get_settings()
    issued_at = datetime.now(UTC)
    payload: dict[str, Any] = {
        **claims,
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + _token_lifetime(settings, expires_delta),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify a bearer token and return its claims.

    Raises :class:`jose.JWTError` for bad signatures, expired tokens and
    tokens without a subject.
    """
    settings = get_settings()
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    if not payload.get("sub"):
        raise JWTError("Token has no subject")
    return payload
