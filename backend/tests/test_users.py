"""Tests for current-user account endpoints."""

from __future__ import annotations

from typing import Any, cast

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core.config import settings
from models import User
from helpers import (
    DummyMinio,
    build_registration,
    login_user,
    png_bytes,
    register_user,
)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


async def _load_user(session: AsyncSession, username: str) -> User:
    result = await session.execute(
        select(User)
        .where(_eq(User.username, username))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _signed_in(client: AsyncClient, **kwargs: Any) -> dict[str, str]:
    payload = await register_user(client, **kwargs)
    await login_user(client, payload)
    return payload


@pytest.mark.asyncio
async def test_get_me_returns_profile(async_client: AsyncClient, fake_storage: DummyMinio):
    payload = await _signed_in(async_client)

    response = await async_client.get("/api/v1/users/me")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == 200
    assert body["message"] == "Current user fetched successfully"
    assert body["data"]["username"] == payload["username"]
    assert body["data"]["email"] == payload["email"]
    assert "passwordHash" not in body["data"]


@pytest.mark.asyncio
async def test_get_me_requires_authentication(async_client: AsyncClient):
    response = await async_client.get("/api/v1/users/me")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"status": 401, "message": "Unauthorized request"}


@pytest.mark.asyncio
async def test_change_password(async_client: AsyncClient, fake_storage: DummyMinio):
    payload = await _signed_in(async_client)

    response = await async_client.post(
        "/api/v1/users/me/password",
        json={"oldPassword": payload["password"], "newPassword": "An0therSecret!"},
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Password changed successfully"

    old_login = await async_client.post(
        "/api/v1/auth/login",
        json={"username": payload["username"], "password": payload["password"]},
    )
    assert old_login.status_code == 401

    new_login = await async_client.post(
        "/api/v1/auth/login",
        json={"username": payload["username"], "password": "An0therSecret!"},
    )
    assert new_login.status_code == 200


@pytest.mark.asyncio
async def test_change_password_rejects_wrong_old_password(async_client: AsyncClient, fake_storage: DummyMinio):
    await _signed_in(async_client)

    response = await async_client.post(
        "/api/v1/users/me/password",
        json={"oldPassword": "NotTheOldOne1", "newPassword": "An0therSecret!"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid old password"


@pytest.mark.asyncio
async def test_change_password_enforces_minimum_length(async_client: AsyncClient, fake_storage: DummyMinio):
    payload = await _signed_in(async_client)

    response = await async_client.post(
        "/api/v1/users/me/password",
        json={"oldPassword": payload["password"], "newPassword": "short"},
    )

    assert response.status_code == 400
    assert response.json()["message"].startswith("newPassword")


@pytest.mark.asyncio
async def test_update_account_details(
    async_client: AsyncClient,
    db_session: AsyncSession,
    fake_storage: DummyMinio,
):
    payload = await _signed_in(async_client)

    response = await async_client.patch(
        "/api/v1/users/me",
        json={"fullName": "  Alice Renamed ", "email": "Renamed@Example.com"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["fullName"] == "Alice Renamed"
    assert data["email"] == "renamed@example.com"

    user = await _load_user(db_session, payload["username"])
    assert user.email == "renamed@example.com"


@pytest.mark.asyncio
async def test_update_account_requires_both_fields(async_client: AsyncClient, fake_storage: DummyMinio):
    await _signed_in(async_client)

    response = await async_client.patch("/api/v1/users/me", json={"fullName": "Only Name"})

    assert response.status_code == 400
    assert response.json()["message"] == "All fields are required"


@pytest.mark.asyncio
async def test_update_account_rejects_invalid_email(async_client: AsyncClient, fake_storage: DummyMinio):
    await _signed_in(async_client)

    response = await async_client.patch(
        "/api/v1/users/me",
        json={"fullName": "Alice", "email": "nope"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_account_rejects_taken_email(async_client: AsyncClient, fake_storage: DummyMinio):
    other = await register_user(async_client)
    await _signed_in(async_client)

    response = await async_client.patch(
        "/api/v1/users/me",
        json={"fullName": "Alice", "email": other["email"].upper()},
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Email is already in use"


@pytest.mark.asyncio
async def test_update_account_keeps_own_email(async_client: AsyncClient, fake_storage: DummyMinio):
    payload = await _signed_in(async_client)

    response = await async_client.patch(
        "/api/v1/users/me",
        json={"fullName": "Alice Again", "email": payload["email"]},
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_update_avatar_replaces_previous_object(
    async_client: AsyncClient,
    db_session: AsyncSession,
    fake_storage: DummyMinio,
):
    payload = await _signed_in(async_client)
    original = await _load_user(db_session, payload["username"])
    original_key = original.avatar_key
    assert original_key in fake_storage.objects

    response = await async_client.patch(
        "/api/v1/users/me/avatar",
        files={"avatar": ("new.png", png_bytes((1600, 1600)), "image/png")},
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Avatar image updated successfully"

    user = await _load_user(db_session, payload["username"])
    assert user.avatar_key != original_key
    assert user.avatar_key in fake_storage.objects
    assert fake_storage.objects[user.avatar_key].startswith(b"\xff\xd8\xff")
    assert response.json()["data"]["avatarUrl"] == user.avatar_url
    assert original_key in fake_storage.removed
    assert original_key not in fake_storage.objects


@pytest.mark.asyncio
async def test_update_avatar_requires_file(async_client: AsyncClient, fake_storage: DummyMinio):
    await _signed_in(async_client)

    response = await async_client.patch("/api/v1/users/me/avatar")

    assert response.status_code == 400
    assert response.json()["message"] == "Avatar file is missing"


@pytest.mark.asyncio
async def test_update_avatar_rejects_oversized_file(
    async_client: AsyncClient,
    fake_storage: DummyMinio,
    monkeypatch: pytest.MonkeyPatch,
):
    await _signed_in(async_client)
    monkeypatch.setattr(settings, "upload_max_bytes", 16)

    response = await async_client.patch(
        "/api/v1/users/me/avatar",
        files={"avatar": ("big.png", png_bytes(), "image/png")},
    )

    assert response.status_code == status.HTTP_413_CONTENT_TOO_LARGE


@pytest.mark.asyncio
async def test_update_avatar_rejects_non_image(async_client: AsyncClient, fake_storage: DummyMinio):
    await _signed_in(async_client)
    stored_before = dict(fake_storage.objects)

    response = await async_client.patch(
        "/api/v1/users/me/avatar",
        files={"avatar": ("avatar.txt", b"plain text", "text/plain")},
    )

    assert response.status_code == 400
    assert fake_storage.objects == stored_before


@pytest.mark.asyncio
async def test_update_cover_image(
    async_client: AsyncClient,
    db_session: AsyncSession,
    fake_storage: DummyMinio,
):
    payload = await _signed_in(async_client, with_cover=True)
    original = await _load_user(db_session, payload["username"])
    original_key = original.cover_image_key
    assert original_key is not None

    response = await async_client.patch(
        "/api/v1/users/me/cover-image",
        files={"coverImage": ("cover.png", png_bytes((400, 120)), "image/png")},
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Cover image updated successfully"
    user = await _load_user(db_session, payload["username"])
    assert user.cover_image_key is not None
    assert user.cover_image_key.startswith("covers/")
    assert response.json()["data"]["coverImageUrl"] == user.cover_image_url
    assert original_key in fake_storage.removed


@pytest.mark.asyncio
async def test_update_cover_image_sets_first_cover(
    async_client: AsyncClient,
    fake_storage: DummyMinio,
):
    await _signed_in(async_client)
    me = await async_client.get("/api/v1/users/me")
    assert me.json()["data"]["coverImageUrl"] == ""

    response = await async_client.patch(
        "/api/v1/users/me/cover-image",
        files={"coverImage": ("cover.png", png_bytes(), "image/png")},
    )

    assert response.status_code == 200
    assert response.json()["data"]["coverImageUrl"].endswith(".jpg")
    assert fake_storage.removed == []


@pytest.mark.asyncio
async def test_update_cover_image_requires_file(async_client: AsyncClient, fake_storage: DummyMinio):
    await _signed_in(async_client)

    response = await async_client.patch("/api/v1/users/me/cover-image")

    assert response.status_code == 400
    assert response.json()["message"] == "Cover image file is missing"


@pytest.mark.asyncio
async def test_account_routes_require_authentication(async_client: AsyncClient):
    for method, path in (
        ("POST", "/api/v1/users/me/password"),
        ("PATCH", "/api/v1/users/me"),
        ("PATCH", "/api/v1/users/me/avatar"),
        ("PATCH", "/api/v1/users/me/cover-image"),
    ):
        response = await async_client.request(method, path, json={})
        assert response.status_code == 401, path


@pytest.mark.asyncio
async def test_profile_payload_uses_camel_case(async_client: AsyncClient, fake_storage: DummyMinio):
    await _signed_in(async_client, payload=build_registration())

    response = await async_client.get("/api/v1/users/me")

    assert set(response.json()["data"]) == {
        "id",
        "username",
        "email",
        "fullName",
        "avatarUrl",
        "coverImageUrl",
        "createdAt",
        "updatedAt",
    }
