"""Identity normalization and user lookup helpers."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import verify_password
from models import User


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def normalize_email(value: str) -> str:
    return value.strip().lower()


def normalize_username(value: str) -> str:
    return value.strip().lower()


async def find_user_by_id(session: AsyncSession, user_id: str) -> User | None:
    result = await session.execute(
        select(User)
        .where(_eq(User.id, user_id))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_user_by_username_or_email(
    session: AsyncSession,
    *,
    username: str | None = None,
    email: str | None = None,
) -> User | None:
    clauses: list[ColumnElement[bool]] = []
    if username:
        lowered_username_column = cast(Any, func.lower(cast(Any, User.username)))
        clauses.append(_eq(lowered_username_column, normalize_username(username)))
    if email:
        lowered_email_column = cast(Any, func.lower(cast(Any, User.email)))
        clauses.append(_eq(lowered_email_column, normalize_email(email)))
    if not clauses:
        return None

    result = await session.execute(select(User).where(or_(*clauses)).limit(1))
    return result.scalar_one_or_none()


async def registration_conflict_exists(
    session: AsyncSession,
    *,
    username: str,
    normalized_email: str,
) -> bool:
    existing = await find_user_by_username_or_email(
        session,
        username=username,
        email=normalized_email,
    )
    return existing is not None


async def email_taken_by_other(
    session: AsyncSession,
    *,
    normalized_email: str,
    user_id: str,
) -> bool:
    lowered_email_column = cast(Any, func.lower(cast(Any, User.email)))
    result = await session.execute(
        select(User.id)
        .where(
            _eq(lowered_email_column, normalized_email),
            cast(ColumnElement[bool], User.id != user_id),
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


def password_matches(user: User, password: str) -> bool:
    return verify_password(password, user.password_hash)
