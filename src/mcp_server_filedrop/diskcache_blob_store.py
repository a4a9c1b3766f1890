"""
DiskCache-based Blob Store

An object-store style backend built on the diskcache library. Payloads live
under flat keys (``blob:<session_id>:<item_id>``) in a SQLite-indexed cache
directory, the way a remote bucket holds objects under prefixed keys.

Key properties:
- Single-value writes: a key either holds the whole payload or nothing
- No TTL on the cache itself; the SessionRegistry decides when blobs die
- No eviction by size; a blob disappears only when the sweeper deletes it
"""

from __future__ import annotations

import uuid
from pathlib import Path

import diskcache
import psutil

from .base_blob_store import BlobStore
from .errors import BlobDeleteError, BlobStoreError
from .storage_types import Item, StoredBlob
from .utils.media_utils import classify_media, safe_file_name


class DiskCacheBlobStore(BlobStore):
    """
    Key/value BlobStore using diskcache.

    Locators have the form ``diskcache://<session_id>/<item_id>/<name>``; the
    tool layer resolves them back through ``read``.
    """

    def __init__(self, cache_dir: str = "/tmp/filedrop_blobs") -> None:
        """
        Initialize DiskCacheBlobStore.

        Args:
            cache_dir: Directory for the cache database and value files
        """
        self._cache_dir = Path(cache_dir)
        self._cache_dir.mkdir(parents=True, exist_ok=True)

        # "none" keeps every blob until it is explicitly deleted
        self._cache = diskcache.Cache(
            directory=str(self._cache_dir),
            eviction_policy="none",
            size_limit=int(1024**4),  # 1TB default limit
        )

    def _get_blob_key(self, session_id: str, item_id: str) -> str:
        """Get cache key for a payload."""
        return f"blob:{session_id}:{item_id}"

    def close(self) -> None:
        """Close the cache and cleanup resources."""
        if hasattr(self, "_cache"):
            self._cache.close()

    def put(
        self, session_id: str, name: str, content_type: str, data: bytes
    ) -> StoredBlob:
        item_id = uuid.uuid4().hex[:12]
        key = self._get_blob_key(session_id, item_id)
        try:
            stored = self._cache.set(key, bytes(data))
        except Exception as e:  # noqa: BLE001
            raise BlobStoreError(f"Failed to store '{name}': {e}") from e
        if not stored:
            raise BlobStoreError(f"Cache refused to store '{name}'")

        return StoredBlob(
            id=item_id,
            locator=f"diskcache://{session_id}/{item_id}/{safe_file_name(name)}",
            size_bytes=len(data),
            media_kind=classify_media(name, content_type),
        )

    def read(self, session_id: str, item_id: str) -> bytes:
        value = self._cache.get(self._get_blob_key(session_id, item_id))
        if value is None:
            raise KeyError(item_id)
        return bytes(value)

    def delete(self, item: Item) -> None:
        key = self._get_blob_key(item.session_id, item.id)
        try:
            self._cache.delete(key)
        except Exception as e:  # noqa: BLE001
            raise BlobDeleteError(f"Failed to delete {key}: {e}") from e

    def blob_count(self) -> int:
        """Number of payloads currently held."""
        return len(self._cache)

    def disk_usage_percent(self) -> float:
        """Get current disk usage percentage."""
        try:
            disk_usage = psutil.disk_usage(str(self._cache_dir))
            return float((disk_usage.used / disk_usage.total) * 100)
        except Exception:
            return 0.0
