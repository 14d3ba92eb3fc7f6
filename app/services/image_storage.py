"""File store for generated images.

Images live under ``<UPLOAD_ROOT>/images/<user_id>/<timestamp>_<random>.png``
and are referenced in the database by their API path
``/api/uploads/images/<user_id>/<file>``, which the uploads route maps back
onto the file system.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import re
import time
import uuid
from pathlib import Path

import httpx

from app.config import settings
from app.utils.exceptions import StorageError
from app.utils.logger import setup_logger

logger = setup_logger("image_storage")

IMAGES_DIR = "images"
UPLOADS_API_PREFIX = "/api/uploads"
DATA_URL_PREFIX = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,")

CONTENT_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
}
DEFAULT_CONTENT_TYPE = "image/png"


def get_upload_root() -> Path:
    return Path(settings.upload_root)


def is_remote_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def decode_base64_image(data: str) -> bytes:
    """Decode a bare base64 payload or a ``data:image/...;base64,`` URL."""
    payload = DATA_URL_PREFIX.sub("", data.strip(), count=1)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise StorageError("Image payload is not valid base64 data.") from e


async def download_image(url: str, timeout: float | None = None) -> bytes:
    async with httpx.AsyncClient(
        timeout=timeout or settings.image_download_timeout, follow_redirects=True
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.content


async def load_image_bytes(url_or_data: str) -> bytes:
    """Buffer the image, fetching remote URLs and decoding inline payloads."""
    if is_remote_url(url_or_data):
        return await download_image(url_or_data)
    return decode_base64_image(url_or_data)


def build_file_name(timestamp_ms: int | None = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{timestamp_ms}_{uuid.uuid4().hex[:13]}.png"


async def save_image_to_file_system(
    url_or_data: str, user_id: int, upload_root: Path | None = None
) -> str:
    """
    Persist an image for ``user_id`` and return its API-relative path.

    Any failure (download, decode, directory creation, write) is reported as
    a ``StorageError``.
    """
    upload_root = upload_root or get_upload_root()
    user_dir = upload_root / IMAGES_DIR / str(user_id)

    try:
        image_bytes = await load_image_bytes(url_or_data)
        user_dir.mkdir(parents=True, exist_ok=True)
        file_name = build_file_name()
        await asyncio.to_thread((user_dir / file_name).write_bytes, image_bytes)
    except StorageError:
        raise
    except (httpx.HTTPError, OSError) as e:
        logger.error(f"Error saving image for user {user_id}: {e}", exc_info=True)
        raise StorageError("Failed to save the image file.") from e

    logger.info(f"Saved {len(image_bytes)} bytes to {user_dir / file_name}")
    return f"{UPLOADS_API_PREFIX}/{IMAGES_DIR}/{user_id}/{file_name}"


def resolve_upload_path(relative_path: str, upload_root: Path | None = None) -> Path | None:
    """
    Map a path below ``/api/uploads/`` onto a file under the upload root.

    Returns None when the path escapes the root (``..`` segments, absolute
    paths, symlinks pointing elsewhere).
    """
    root = (upload_root or get_upload_root()).resolve()
    candidate = (root / relative_path.lstrip("/")).resolve()
    if candidate == root or not candidate.is_relative_to(root):
        return None
    return candidate


def guess_content_type(file_name: str) -> str:
    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    return CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)
