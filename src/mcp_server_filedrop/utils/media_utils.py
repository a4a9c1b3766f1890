from __future__ import annotations

import mimetypes
import os
import re

from ..storage_types import MediaKind

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
VIDEO_EXTENSIONS = {".mp4", ".webm"}
DOCUMENT_EXTENSIONS = {".pdf"}

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Characters allowed in on-disk file names; everything else becomes "_"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._ -]")


def classify_media(name: str, content_type: str | None = None) -> MediaKind:
    """Derive the media kind from the extension, falling back to content type."""
    ext = os.path.splitext(name)[1].lower()
    if ext in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    if ext in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    if ext in DOCUMENT_EXTENSIONS:
        return MediaKind.DOCUMENT

    major = (content_type or "").split(";", 1)[0].strip().lower()
    if major.startswith("image/"):
        return MediaKind.IMAGE
    if major.startswith("video/"):
        return MediaKind.VIDEO
    if major == "application/pdf" or major.startswith("text/"):
        return MediaKind.DOCUMENT
    return MediaKind.OTHER


def resolve_content_type(name: str, content_type: str | None) -> str:
    """Use the client's content type when given, else guess from the name."""
    if content_type and content_type.strip():
        return content_type.strip()
    guessed, _ = mimetypes.guess_type(name)
    return guessed or DEFAULT_CONTENT_TYPE


def safe_file_name(name: str) -> str:
    """Reduce an untrusted client file name to a single safe path segment."""
    base = os.path.basename(name.replace("\\", "/")).strip()
    base = _UNSAFE_CHARS.sub("_", base)
    if base in {"", ".", ".."}:
        return "file"
    return base[:255]
