"""
Object key derivation for uploads.

Keys have the shape ``<folder>/<name>.<ext>``. The extension comes from the
original filename when it carries a short one, otherwise from the declared
content type, otherwise ``bin``.
"""

from __future__ import annotations

import re
import uuid

DEFAULT_FOLDER = "uploads"
FALLBACK_EXTENSION = "bin"
MAX_EXTENSION_LENGTH = 5

EXTENSION_BY_CONTENT_TYPE: dict[str, str] = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "image/avif": "avif",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "application/pdf": "pdf",
}

_TRAILING_EXTENSION = re.compile(r"\.[^.]+$")


def generate_object_id() -> str:
    return str(uuid.uuid4())


def resolve_extension(filename: str | None = None, content_type: str | None = None) -> str:
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1].lower()
        if ext and len(ext) <= MAX_EXTENSION_LENGTH:
            return ext
    return EXTENSION_BY_CONTENT_TYPE.get(content_type or "", FALLBACK_EXTENSION)


def name_from_filename(filename: str | None) -> str | None:
    """Strip the last extension from ``filename``; ``None`` when nothing is left."""
    if not filename:
        return None
    return _TRAILING_EXTENSION.sub("", filename) or None


def derive_key(
    folder: str | None = None,
    supplied_name: str | None = None,
    original_filename: str | None = None,
    content_type: str | None = None,
    default_folder: str = DEFAULT_FOLDER,
) -> str:
    ext = resolve_extension(original_filename, content_type)
    name = supplied_name or generate_object_id()
    return f"{folder or default_folder}/{name}.{ext}"
