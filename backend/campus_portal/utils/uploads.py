import os
import re
import time
import logging
from typing import Optional

import aiofiles
from fastapi import UploadFile

from ..core.config import settings
from .file_paths import ensure_upload_directory, get_relative_upload_path, get_full_upload_path

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


class UploadError(ValueError):
    pass


def build_upload_filename(original_name: Optional[str], content_type: str, now_ms: Optional[int] = None) -> str:
    """``<original stem>-<epoch ms>.<mime subtype>``"""
    stem = os.path.splitext(os.path.basename(original_name or ""))[0]
    stem = _UNSAFE_CHARS.sub("_", stem).strip("_") or "upload"
    subtype = content_type.split("/")[-1].split("+")[0].lower()
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{stem}-{now_ms}.{subtype}"


async def save_image_upload(upload: UploadFile, file_type: str) -> str:
    """Validate and store an uploaded image. Returns the path relative to the upload base dir."""
    content_type = (upload.content_type or "").lower()
    if content_type not in settings.allowed_image_types:
        raise UploadError(
            f"Unsupported file type '{content_type or 'unknown'}'. "
            f"Allowed: {', '.join(settings.allowed_image_types)}"
        )

    content = await upload.read()
    if not content:
        raise UploadError("Uploaded file is empty")
    if len(content) > settings.max_upload_size:
        raise UploadError(f"File too large. Maximum size is {settings.max_upload_size // (1024 * 1024)}MB")

    target_dir = ensure_upload_directory(file_type)
    now_ms = int(time.time() * 1000)
    filename = build_upload_filename(upload.filename, content_type, now_ms)
    while os.path.exists(os.path.join(target_dir, filename)):
        now_ms += 1
        filename = build_upload_filename(upload.filename, content_type, now_ms)

    async with aiofiles.open(os.path.join(target_dir, filename), "wb") as f:
        await f.write(content)

    logger.info(f"Stored upload {filename} ({len(content)} bytes) in {file_type}")
    return get_relative_upload_path(file_type, filename)


def remove_upload(relative_path: Optional[str]) -> bool:
    if not relative_path:
        return False
    try:
        os.remove(get_full_upload_path(relative_path))
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.error(f"Failed to remove upload {relative_path}: {e}")
        return False
