"""Core configuration, security and error primitives."""

from .config import Settings, get_settings, settings
from .errors import (
    ApiError,
    ConflictError,
    InfrastructureError,
    NotFoundError,
    TokenInvalidError,
    UnauthenticatedError,
    ValidationFailedError,
)
from .logging import configure_logging
from .security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    needs_rehash,
    verify_password,
)

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "configure_logging",
    "ApiError",
    "ValidationFailedError",
    "UnauthenticatedError",
    "TokenInvalidError",
    "NotFoundError",
    "ConflictError",
    "InfrastructureError",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
