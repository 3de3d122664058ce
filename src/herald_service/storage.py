"""Local filesystem storage for uploaded images.

Design Decision: File Storage Strategy
--------------------------------------
Files are stored under ``settings.media_base_path`` as
``{folder}/{uuid}{ext}`` and served by the static mount at
``settings.media_url_prefix``. The storage key (``folder/uuid.ext``) is
what ``Media.filename`` records; the public URL is derived from it.

Random names avoid collisions and never expose the uploader's filename
on disk. The original name is kept in the database only.
"""

import logging
from pathlib import Path
from uuid import uuid4

from fastapi import HTTPException, UploadFile, status

from herald_service.config import settings

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


def media_root() -> Path:
    return Path(settings.media_base_path)


def public_url(key: str) -> str:
    """Public URL for a storage key."""
    return f"{settings.media_url_prefix.rstrip('/')}/{key}"


async def read_image_upload(file: UploadFile) -> bytes:
    """Read an uploaded image after checking type and size.

    Args:
        file: Multipart upload

    Returns:
        File bytes

    Raises:
        HTTPException: 400 for a missing filename or empty file, 415 for a
            type outside ``settings.allowed_image_types``, 413 when larger
            than ``settings.max_upload_size_mb``
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filename is required",
        )

    if file.content_type not in settings.allowed_image_types_list:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=(
                f"File type {file.content_type} is not allowed. "
                f"Allowed: {', '.join(settings.allowed_image_types_list)}"
            ),
        )

    content = await file.read()
    if len(content) > settings.max_upload_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size is {settings.max_upload_size_mb}MB",
        )
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is empty",
        )

    return content


def save_file(content: bytes, folder: str, mime_type: str) -> str:
    """Write bytes under a random name and return the storage key.

    Raises:
        OSError: If the file cannot be written
    """
    extension = IMAGE_EXTENSIONS.get(mime_type, "")
    key = f"{folder}/{uuid4().hex}{extension}"
    path = media_root() / key
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)

    logger.info(f"Stored {len(content)} bytes at {path}")
    return key


def delete_file(key: str) -> bool:
    """Remove a stored file. Returns False when it was already gone."""
    path = media_root() / key
    try:
        path.unlink()
    except FileNotFoundError:
        logger.warning(f"Stored file {path} already missing")
        return False
    return True
