"""Password hashing and JWT helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Literal
from uuid import uuid4

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from .config import settings

TokenType = Literal["access", "refresh"]

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password with Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """Return True when the stored hash uses outdated Argon2 parameters."""
    try:
        return _password_hasher.check_needs_rehash(password_hash)
    except InvalidHashError:
        return True


def _secret_for(token_type: TokenType) -> str:
    if token_type == "access":
        return settings.access_token_secret.get_secret_value()
    return settings.refresh_token_secret.get_secret_value()


def _encode(
    subject: str,
    token_type: TokenType,
    expires_delta: timedelta,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        **(extra_claims or {}),
        "sub": subject,
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
        "jti": uuid4().hex,
    }
    return jwt.encode(payload, _secret_for(token_type), algorithm=settings.jwt_algorithm)


def create_access_token(
    subject: str,
    *,
    claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a short-lived access token for ``subject``."""
    ttl = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(subject, "access", ttl, claims)


def create_refresh_token(subject: str, *, expires_delta: timedelta | None = None) -> str:
    """Sign a long-lived refresh token for ``subject``."""
    ttl = expires_delta or timedelta(minutes=settings.refresh_token_expire_minutes)
    return _encode(subject, "refresh", ttl)


def decode_token(token: str, token_type: TokenType) -> dict[str, Any]:
    """Verify signature, expiry and type of ``token``.

    Raises ``ValueError`` for any verification failure so callers never
    depend on PyJWT exception types.
    """
    try:
        payload = jwt.decode(
            token,
            _secret_for(token_type),
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise ValueError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise ValueError("Invalid token") from exc

    if payload.get("type") != token_type:
        raise ValueError("Unexpected token type")
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise ValueError("Token subject missing")
    return payload
