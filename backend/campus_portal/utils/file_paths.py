"""
Helpers for upload file locations.

Records store a path relative to the upload base directory
(e.g. ``uploads/proofs/photo-1700000000000.png``); files live under
``<UPLOAD_BASE_DIR>/uploads/...`` and are served at ``/uploads/...``.
"""
import os
from typing import Tuple

from ..core.config import settings


def get_upload_paths() -> Tuple[str, str]:
    """Return (base_dir, relative uploads dir)"""
    return settings.upload_base_dir, "uploads"


def get_uploads_root() -> str:
    base_dir, uploads_dir = get_upload_paths()
    return os.path.join(base_dir, uploads_dir)


def get_full_upload_path(relative_path: str) -> str:
    base_dir, _ = get_upload_paths()
    return os.path.join(base_dir, relative_path)


def get_relative_upload_path(file_type: str, filename: str) -> str:
    _, uploads_dir = get_upload_paths()
    return os.path.join(uploads_dir, file_type, filename)


def ensure_upload_directory(file_type: str) -> str:
    """Create the directory for ``file_type`` and return its absolute path"""
    base_dir, uploads_dir = get_upload_paths()
    full_dir = os.path.join(base_dir, uploads_dir, file_type)
    os.makedirs(full_dir, exist_ok=True)
    return full_dir


class FileTypes:
    APPLICATIONS = "applications"
    COMPLAINTS = "complaints"
    PROOFS = "proofs"
    CANDIDATES = "candidates"

    ALL = (APPLICATIONS, COMPLAINTS, PROOFS, CANDIDATES)
