"""Image upload reading, normalization and spooling."""

from __future__ import annotations

import tempfile
from io import BytesIO
from pathlib import Path

from fastapi import UploadFile
from PIL import Image, ImageOps, UnidentifiedImageError

JPEG_CONTENT_TYPE = "image/jpeg"
MAX_IMAGE_DIMENSION = 1080
READ_CHUNK_SIZE = 64 * 1024


class UploadTooLargeError(ValueError):
    """Raised when an upload exceeds the configured byte limit."""


async def read_upload_file(upload: UploadFile, max_bytes: int) -> bytes:
    """Read an upload into memory, refusing anything above ``max_bytes``."""
    buffer = bytearray()
    while True:
        chunk = await upload.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise UploadTooLargeError(f"File exceeds maximum size of {max_bytes} bytes")
    if not buffer:
        raise ValueError("Uploaded file is empty")
    return bytes(buffer)


def process_image_bytes(data: bytes) -> tuple[bytes, str]:
    """Decode, orient, downscale and re-encode an image as JPEG."""
    try:
        with Image.open(BytesIO(data)) as source:
            source.load()
            image = ImageOps.exif_transpose(source)
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("Unsupported image format") from exc

    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    image.thumbnail((MAX_IMAGE_DIMENSION, MAX_IMAGE_DIMENSION))

    output = BytesIO()
    image.save(output, format="JPEG", quality=85, optimize=True)
    return output.getvalue(), JPEG_CONTENT_TYPE


def spool_to_temp_file(data: bytes, directory: Path, *, suffix: str = ".jpg") -> Path:
    """Write ``data`` to a new file under ``directory`` and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(dir=directory, suffix=suffix, delete=False) as handle:
        handle.write(data)
    return Path(handle.name)
