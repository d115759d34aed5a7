"""Classification of driver errors raised on commit."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION_SQLSTATE = "23505"
_UNIQUE_MARKERS = ("duplicate key", "unique constraint", "sqlite_constraint_unique")


def is_unique_violation(error: IntegrityError) -> bool:
    """Tell apart username/email collisions from other integrity failures.

    asyncpg exposes ``sqlstate``; sqlite only reports text such as
    ``UNIQUE constraint failed: users.email``.
    """
    driver_error = getattr(error, "orig", None)
    code = getattr(driver_error, "sqlstate", None) or getattr(driver_error, "pgcode", None)
    if code == UNIQUE_VIOLATION_SQLSTATE:
        return True
    if getattr(driver_error, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE":
        return True
    text = str(driver_error or error).lower()
    return any(marker in text for marker in _UNIQUE_MARKERS)
