"""
File Drop

Facade over the session registry, session manager, upload coordinator and
eviction sweeper. This is the whole interface the tool layer talks to.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Callable, Sequence

from .base_blob_store import BlobStore
from .config import FileDropSettings
from .diskcache_blob_store import DiskCacheBlobStore
from .errors import InvalidSessionId, ItemNotFound, SessionNotFound
from .eviction_sweeper import EvictionSweeper
from .filesystem_blob_store import FilesystemBlobStore
from .session_manager import SessionManager
from .session_registry import SessionRegistry
from .storage_types import IncomingFile, Item, StorageStats, UploadResult
from .upload_coordinator import UploadCoordinator
from .utils.listing_utils import EMPTY_LISTING, summarize_session_items
from .utils.session_utils import validate_session_id

logger = logging.getLogger(__name__)


def create_blob_store(settings: FileDropSettings) -> BlobStore:
    """Build the blob backend named by ``settings.blob_backend``."""
    if settings.blob_backend == "diskcache":
        return DiskCacheBlobStore(cache_dir=settings.blob_dir)
    return FilesystemBlobStore(settings.blob_dir)


class FileDrop:
    def __init__(
        self,
        settings: FileDropSettings | None = None,
        blob_store: BlobStore | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.settings = settings or FileDropSettings.from_env()
        self._clock = clock or time.time

        if blob_store is None:
            os.makedirs(self.settings.blob_dir, exist_ok=True)
            blob_store = create_blob_store(self.settings)
        self.blob_store = blob_store

        self.registry = SessionRegistry(clock=self._clock)
        self.sessions = SessionManager(
            self.registry,
            ttl_seconds=self.settings.ttl_seconds,
            token_bytes=self.settings.session_token_bytes,
            accept_unknown_tokens=self.settings.accept_unknown_tokens,
            clock=self._clock,
        )
        self.uploads = UploadCoordinator(
            self.registry,
            self.blob_store,
            max_file_bytes=self.settings.max_file_bytes,
            max_workers=self.settings.upload_workers,
            clock=self._clock,
        )
        self.sweeper = EvictionSweeper(
            self.registry,
            self.blob_store,
            ttl_seconds=self.settings.ttl_seconds,
            interval_seconds=self.settings.sweep_interval_seconds,
            clock=self._clock,
        )
        logger.info(
            f"FileDrop initialized with {self.blob_store.__class__.__name__} "
            f"(ttl={self.settings.ttl_seconds}s)"
        )

    def _validate(self, session_id: str | None) -> str:
        return validate_session_id(session_id, self.settings.session_token_bytes)

    # Sessions
    def resolve_session(self, token: str | None = None) -> str:
        return self.sessions.resolve(token)

    def session_url(self, session_id: str, base_url: str) -> str:
        """Shareable URL for a session's listing page."""
        session_id = self._validate(session_id)
        return f"{base_url.rstrip('/')}/{session_id}"

    # Uploads
    def upload(self, session_id: str, files: Sequence[IncomingFile]) -> UploadResult:
        """
        Store files for a session.

        Raises:
            InvalidSessionId: If the id is malformed, or was never issued or
                registered while unknown tokens are refused
        """
        session_id = self._validate(session_id)
        if not self.sessions.accept_unknown_tokens and not self.sessions.is_known(
            session_id
        ):
            raise InvalidSessionId(f"Unknown session '{session_id}'")
        return self.uploads.store(session_id, files)

    # Reads
    def list_files(self, session_id: str) -> list[Item]:
        """
        Return the unexpired items of a session.

        Raises:
            SessionNotFound: If the id is malformed, unknown or expired
        """
        if not self.sessions.is_valid(session_id):
            raise SessionNotFound(str(session_id))
        items = self.registry.list_items(session_id, ttl_seconds=self.settings.ttl_seconds)
        if items is None:
            raise SessionNotFound(session_id)
        return items

    def open_file(self, session_id: str, item_id: str) -> tuple[Item, bytes]:
        """Return an unexpired item and its payload."""
        items = self.list_files(session_id)
        item = next((i for i in items if i.id == item_id), None)
        if item is None:
            raise ItemNotFound(session_id, item_id)
        try:
            data = self.blob_store.read(session_id, item_id)
        except KeyError:
            raise ItemNotFound(session_id, item_id) from None
        return item, data

    def expires_in(self, session_id: str) -> float | None:
        expires_at = self.registry.expires_at(session_id, self.settings.ttl_seconds)
        if expires_at is None:
            return None
        return max(0.0, expires_at - self._clock())

    def render_listing(self, session_id: str) -> str:
        """Plain-text listing of a session, or the empty-listing text."""
        try:
            items = self.list_files(session_id)
        except SessionNotFound:
            return EMPTY_LISTING
        return summarize_session_items(session_id, items, self.expires_in(session_id))

    # Eviction
    def sweep_once(self, now: float | None = None) -> list[Item]:
        return self.sweeper.sweep_once(now)

    def start(self) -> None:
        self.sweeper.start()

    def stop(self) -> None:
        self.sweeper.stop()

    def stats(self) -> StorageStats:
        sessions, items, size_bytes = self.registry.stats()
        return StorageStats(
            total_sessions=sessions,
            total_items=items,
            total_size_bytes=size_bytes,
            disk_usage_percent=self.blob_store.disk_usage_percent(),
        )

    def close(self) -> None:
        self.stop()
        self.blob_store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
