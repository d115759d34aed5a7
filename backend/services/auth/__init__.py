"""Authentication domain services."""

from .cookies import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    clear_token_cookies,
    set_token_cookies,
)
from .identity_resolution import (
    email_taken_by_other,
    find_user_by_id,
    find_user_by_username_or_email,
    normalize_email,
    normalize_username,
    password_matches,
    registration_conflict_exists,
)
from .token_store import (
    TokenPair,
    hash_refresh_token,
    invalidate_refresh_token,
    issue_token_pair,
    rotate_refresh_token,
    verify_access_token,
)

__all__ = [
    "ACCESS_COOKIE",
    "REFRESH_COOKIE",
    "clear_token_cookies",
    "set_token_cookies",
    "normalize_email",
    "normalize_username",
    "find_user_by_id",
    "find_user_by_username_or_email",
    "registration_conflict_exists",
    "email_taken_by_other",
    "password_matches",
    "TokenPair",
    "hash_refresh_token",
    "issue_token_pair",
    "verify_access_token",
    "rotate_refresh_token",
    "invalidate_refresh_token",
]
