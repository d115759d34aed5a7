"""MinIO client utilities and the media upload service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from minio import Minio
from minio.error import S3Error

from core import settings

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = frozenset({"NoSuchKey", "NoSuchObject", "ResourceNotFound"})


class MediaUploadError(RuntimeError):
    """Raised when a local file could not be stored in the bucket."""


@dataclass(frozen=True, slots=True)
class UploadedObject:
    object_key: str
    url: str


@lru_cache
def get_minio_client() -> Minio:
    """Return a cached MinIO client configured from settings."""
    endpoint = settings.minio_endpoint
    access_key = settings.minio_access_key
    secret_key = settings.minio_secret_key.get_secret_value()
    secure = settings.minio_secure

    return Minio(
        endpoint,
        access_key=access_key,
        secret_key=secret_key,
        secure=secure,
    )


def ensure_bucket(client: Minio | None = None) -> None:
    """Ensure the configured bucket exists."""
    client = client or get_minio_client()
    bucket_name = settings.minio_bucket

    if client.bucket_exists(bucket_name):  # pragma: no cover - network call
        return

    try:
        client.make_bucket(bucket_name)  # pragma: no cover - network call
    except S3Error as exc:  # pragma: no cover - handle race conditions
        allowed_codes = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}
        if exc.code not in allowed_codes:
            raise


def public_url_for(object_key: str) -> str:
    base = settings.minio_public_url.rstrip("/")
    return f"{base}/{settings.minio_bucket}/{object_key.lstrip('/')}"


def upload_local_file(
    local_path: Path | str,
    object_key: str,
    *,
    content_type: str = "application/octet-stream",
    client: Minio | None = None,
) -> UploadedObject:
    """Store a local file under ``object_key`` and return its public URL.

    The local file is removed whether or not the upload succeeds.
    """
    path = Path(local_path)
    normalized_object_key = object_key.strip()
    try:
        if not normalized_object_key:
            raise MediaUploadError("object_key must not be empty")
        if not path.is_file():
            raise MediaUploadError(f"Local file not found: {path.name}")

        client = client or get_minio_client()
        try:
            ensure_bucket(client)
            client.fput_object(
                settings.minio_bucket,
                normalized_object_key,
                str(path),
                content_type=content_type,
            )  # pragma: no cover - network call
        except S3Error as exc:
            logger.warning(
                "Storage rejected upload",
                extra={"object_key": normalized_object_key, "code": exc.code},
            )
            raise MediaUploadError(f"Upload rejected by storage: {exc.code}") from exc
        except OSError as exc:
            logger.warning("Storage unreachable during upload", extra={"object_key": normalized_object_key})
            raise MediaUploadError("Storage unreachable") from exc
    finally:
        path.unlink(missing_ok=True)

    return UploadedObject(object_key=normalized_object_key, url=public_url_for(normalized_object_key))


def delete_object(object_key: str, client: Minio | None = None) -> None:
    """Delete an object from the configured bucket when it exists."""
    client = client or get_minio_client()
    try:
        client.remove_object(settings.minio_bucket, object_key)  # pragma: no cover - network call
    except S3Error as exc:  # pragma: no cover - network call
        if exc.code not in MISSING_OBJECT_CODES:
            raise
        logger.info("Object already absent", extra={"object_key": object_key})
