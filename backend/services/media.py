"""Image upload pipeline used by registration and profile routes."""

from __future__ import annotations

import asyncio
from uuid import uuid4

from fastapi import UploadFile

from core import settings

from .images import process_image_bytes, read_upload_file, spool_to_temp_file
from .storage import UploadedObject, upload_local_file

AVATAR_PREFIX = "avatars"
COVER_IMAGE_PREFIX = "covers"


async def upload_image(upload: UploadFile, *, prefix: str) -> UploadedObject:
    """Normalize an uploaded image and push it to object storage.

    Raises ``UploadTooLargeError`` or ``ValueError`` for bad input and
    ``MediaUploadError`` when storage refuses the file.
    """
    data = await read_upload_file(upload, settings.upload_max_bytes)
    processed_bytes, content_type = await asyncio.to_thread(process_image_bytes, data)
    local_path = await asyncio.to_thread(
        spool_to_temp_file,
        processed_bytes,
        settings.upload_tmp_dir,
    )
    object_key = f"{prefix}/{uuid4().hex}.jpg"
    return await asyncio.to_thread(
        upload_local_file,
        local_path,
        object_key,
        content_type=content_type,
    )
