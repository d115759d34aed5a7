"""Access/refresh token issuance, verification, rotation and invalidation.

Each user record holds a single refresh-token slot (the SHA-256 of the only
refresh token currently accepted). Issuing a pair overwrites the slot,
rotating a pair compare-and-sets it, and logging out clears it. There is no
revocation list and no multi-device support: a new login on one device
ends the refresh session of every other device.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy import update
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import (
    InfrastructureError,
    TokenInvalidError,
    UnauthenticatedError,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from models import User

from .identity_resolution import find_user_by_id

logger = logging.getLogger(__name__)

ISSUE_FAILURE_MESSAGE = "Something went wrong while generating refresh and access token"
INVALID_REFRESH_MESSAGE = "Invalid refresh token"
REUSED_REFRESH_MESSAGE = "Refresh token is expired or used"
INVALID_ACCESS_MESSAGE = "Invalid access token"


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _mint_pair(user: User) -> TokenPair:
    access_token = create_access_token(
        user.id,
        claims={
            "username": user.username,
            "email": user.email,
            "full_name": user.full_name,
        },
    )
    refresh_token = create_refresh_token(user.id)
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


async def _resolve_user(session: AsyncSession, user_id: str) -> User | None:
    try:
        return await find_user_by_id(session, user_id)
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed during token handling")
        raise InfrastructureError(ISSUE_FAILURE_MESSAGE) from exc


async def issue_token_pair(session: AsyncSession, user_id: str) -> TokenPair:
    """Mint a token pair for ``user_id`` and make its refresh token current.

    Only the refresh-token column is written; the rest of the record is not
    revalidated.
    """
    user = await _resolve_user(session, user_id)
    if user is None:
        raise InfrastructureError(ISSUE_FAILURE_MESSAGE)

    try:
        pair = _mint_pair(user)
        await session.execute(
            update(User)
            .where(_eq(User.id, user_id))
            .values(refresh_token_hash=hash_refresh_token(pair.refresh_token))
            .execution_options(synchronize_session=False)
        )
        await session.commit()
    except Exception as exc:
        await session.rollback()
        logger.exception("Failed to issue token pair", extra={"user_id": user_id})
        raise InfrastructureError(ISSUE_FAILURE_MESSAGE) from exc
    return pair


def verify_access_token(token: str | None) -> str:
    """Return the user id encoded in a valid access token."""
    if not token:
        raise UnauthenticatedError("Unauthorized request")
    try:
        payload = decode_token(token, "access")
    except ValueError as exc:
        raise UnauthenticatedError(INVALID_ACCESS_MESSAGE) from exc
    return cast(str, payload["sub"])


async def rotate_refresh_token(session: AsyncSession, token: str | None) -> TokenPair:
    """Exchange a current refresh token for a new pair.

    The presented token is consumed: the slot is swapped with a
    compare-and-set, so of two concurrent rotations with the same token at
    most one succeeds.
    """
    if not token or not token.strip():
        raise UnauthenticatedError("Unauthorized request")

    try:
        payload = decode_token(token, "refresh")
    except ValueError as exc:
        raise TokenInvalidError(INVALID_REFRESH_MESSAGE) from exc

    user_id = cast(str, payload["sub"])
    user = await _resolve_user(session, user_id)
    if user is None:
        raise TokenInvalidError(INVALID_REFRESH_MESSAGE)

    presented_hash = hash_refresh_token(token)
    stored_hash = user.refresh_token_hash
    if stored_hash is None or not hmac.compare_digest(stored_hash, presented_hash):
        raise TokenInvalidError(REUSED_REFRESH_MESSAGE)

    try:
        pair = _mint_pair(user)
        result = cast(
            CursorResult[Any],
            await session.execute(
                update(User)
                .where(
                    _eq(User.id, user_id),
                    _eq(User.refresh_token_hash, presented_hash),
                )
                .values(refresh_token_hash=hash_refresh_token(pair.refresh_token))
                .execution_options(synchronize_session=False)
            ),
        )
        swapped = result.rowcount == 1
        if swapped:
            await session.commit()
        else:
            await session.rollback()
    except Exception as exc:
        await session.rollback()
        logger.exception("Failed to rotate refresh token", extra={"user_id": user_id})
        raise InfrastructureError(ISSUE_FAILURE_MESSAGE) from exc

    if not swapped:
        logger.info("Refresh token lost a concurrent rotation", extra={"user_id": user_id})
        raise TokenInvalidError(REUSED_REFRESH_MESSAGE)
    return pair


async def invalidate_refresh_token(session: AsyncSession, user_id: str) -> None:
    """Clear the refresh-token slot so no outstanding refresh token works."""
    try:
        await session.execute(
            update(User)
            .where(_eq(User.id, user_id))
            .values(refresh_token_hash=None)
            .execution_options(synchronize_session=False)
        )
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Failed to clear refresh token", extra={"user_id": user_id})
        raise InfrastructureError("Something went wrong while logging out") from exc
