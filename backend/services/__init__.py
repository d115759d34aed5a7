"""Business logic services."""

from .images import (
    JPEG_CONTENT_TYPE,
    MAX_IMAGE_DIMENSION,
    UploadTooLargeError,
    process_image_bytes,
    read_upload_file,
    spool_to_temp_file,
)
from .media import AVATAR_PREFIX, COVER_IMAGE_PREFIX, upload_image
from .storage import (
    MediaUploadError,
    UploadedObject,
    delete_object,
    ensure_bucket,
    get_minio_client,
    public_url_for,
    upload_local_file,
)

__all__ = [
    "get_minio_client",
    "ensure_bucket",
    "delete_object",
    "public_url_for",
    "upload_local_file",
    "UploadedObject",
    "MediaUploadError",
    "process_image_bytes",
    "read_upload_file",
    "spool_to_temp_file",
    "MAX_IMAGE_DIMENSION",
    "JPEG_CONTENT_TYPE",
    "UploadTooLargeError",
    "upload_image",
    "AVATAR_PREFIX",
    "COVER_IMAGE_PREFIX",
]
