"""
Storage Types and Data Classes

This module contains the core data structures and enums used by the file drop.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class MediaKind(Enum):
    """Coarse media classification used for display."""

    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    OTHER = "other"


@dataclass(frozen=True)
class IncomingFile:
    """One file of an upload request, as received from the client."""

    name: str
    content_type: str | None
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class StoredBlob:
    """What a blob store reports back after a confirmed write."""

    id: str
    locator: str
    size_bytes: int
    media_kind: MediaKind


@dataclass(frozen=True)
class Item:
    """A stored upload that belongs to exactly one session."""

    id: str
    session_id: str
    display_name: str
    locator: str
    media_kind: MediaKind
    size_bytes: int
    created_at: float
    content_type: str = "application/octet-stream"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "display_name": self.display_name,
            "locator": self.locator,
            "media_kind": self.media_kind.value,
            "size_bytes": self.size_bytes,
            "created_at": self.created_at,
            "content_type": self.content_type,
        }


@dataclass(frozen=True)
class UploadFailure:
    """A file that could not be stored, with a human-readable reason."""

    name: str
    reason: str


@dataclass
class UploadResult:
    """Per-file outcome of an upload request."""

    succeeded: list[Item] = field(default_factory=list)
    failed: list[UploadFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, object]:
        return {
            "succeeded": [item.to_dict() for item in self.succeeded],
            "failed": [{"name": f.name, "reason": f.reason} for f in self.failed],
        }


@dataclass
class StorageStats:
    """Storage statistics for monitoring."""

    total_sessions: int
    total_items: int
    total_size_bytes: int
    disk_usage_percent: float
