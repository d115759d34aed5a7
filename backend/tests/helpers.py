"""Shared helpers for the test-suite."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any
from uuid import uuid4

from httpx import AsyncClient
from PIL import Image

PASSWORD = "Sup3rSecret!"


class DummyMinio:
    """In-memory stand-in for the MinIO client."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.removed: list[str] = []

    def bucket_exists(self, bucket_name: str) -> bool:
        return True

    def make_bucket(self, bucket_name: str) -> None:  # pragma: no cover - not used
        return None

    def fput_object(
        self,
        bucket_name: str,
        object_name: str,
        file_path: str,
        content_type: Any = None,
    ) -> None:
        self.objects[object_name] = Path(file_path).read_bytes()

    def remove_object(self, bucket_name: str, object_name: str) -> None:
        self.removed.append(object_name)
        self.objects.pop(object_name, None)


def png_bytes(size: tuple[int, int] = (64, 64)) -> bytes:
    image = Image.new("RGB", size, color=(200, 30, 30))
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def build_registration() -> dict[str, str]:
    suffix = uuid4().hex[:8]
    return {
        "fullName": "Alice Example",
        "username": f"alice_{suffix}",
        "email": f"alice_{suffix}@example.com",
        "password": PASSWORD,
    }


async def register_user(
    client: AsyncClient,
    payload: dict[str, str] | None = None,
    *,
    with_cover: bool = False,
) -> dict[str, str]:
    payload = payload or build_registration()
    files: dict[str, tuple[str, bytes, str]] = {
        "avatar": ("avatar.png", png_bytes(), "image/png"),
    }
    if with_cover:
        files["coverImage"] = ("cover.png", png_bytes((200, 80)), "image/png")
    response = await client.post("/api/v1/auth/register", data=payload, files=files)
    assert response.status_code == 201, response.text
    return payload


async def login_user(client: AsyncClient, payload: dict[str, str]) -> dict[str, Any]:
    response = await client.post(
        "/api/v1/auth/login",
        json={"username": payload["username"], "password": payload["password"]},
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]
