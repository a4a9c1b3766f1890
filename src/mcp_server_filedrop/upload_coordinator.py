"""
Upload Coordinator

Drives the files of one upload request through the blob store and publishes
each completed file into the session registry.

Rules:
- The whole request is rejected up front when it carries no files or when
  any file exceeds the byte ceiling; nothing is written in that case.
- Files are written independently, in parallel. A failed file is reported
  and never affects its siblings or the items already recorded.
- An item is recorded only after the backend confirms the write, and its
  ``created_at`` is taken at that moment.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Sequence

from .base_blob_store import BlobStore
from .errors import NoFilesSupplied, PayloadTooLarge
from .session_registry import SessionRegistry
from .storage_types import IncomingFile, Item, UploadFailure, UploadResult
from .utils.media_utils import resolve_content_type

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_BYTES = 100 * 1024 * 1024  # 100MB


class UploadCoordinator:
    """Store incoming files for a session and record them in the registry."""

    def __init__(
        self,
        registry: SessionRegistry,
        blob_store: BlobStore,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
        max_workers: int = 4,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._registry = registry
        self._blob_store = blob_store
        self._max_file_bytes = max_file_bytes
        self._max_workers = max(1, max_workers)
        self._clock = clock or time.time

    @property
    def max_file_bytes(self) -> int:
        return self._max_file_bytes

    def _check_admission(self, files: Sequence[IncomingFile]) -> None:
        if not files:
            raise NoFilesSupplied()
        for incoming in files:
            if incoming.size_bytes > self._max_file_bytes:
                raise PayloadTooLarge(
                    incoming.name, incoming.size_bytes, self._max_file_bytes
                )

    def _store_one(self, session_id: str, incoming: IncomingFile) -> Item:
        content_type = resolve_content_type(incoming.name, incoming.content_type)
        blob = self._blob_store.put(
            session_id, incoming.name, content_type, incoming.data
        )
        item = Item(
            id=blob.id,
            session_id=session_id,
            display_name=incoming.name,
            locator=blob.locator,
            media_kind=blob.media_kind,
            size_bytes=blob.size_bytes,
            created_at=self._clock(),
            content_type=content_type,
        )
        self._registry.append_item(session_id, item)
        return item

    def store(self, session_id: str, files: Sequence[IncomingFile]) -> UploadResult:
        """
        Store a batch of files for a session.

        Args:
            session_id: A validated session id
            files: The files of the request

        Returns:
            UploadResult with succeeded items in completion order and failures

        Raises:
            NoFilesSupplied: If ``files`` is empty
            PayloadTooLarge: If any file exceeds the byte ceiling
        """
        self._check_admission(files)
        self._registry.ensure_session(session_id)

        result = UploadResult()
        workers = min(self._max_workers, len(files))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="filedrop-upload"
        ) as pool:
            futures = {
                pool.submit(self._store_one, session_id, incoming): incoming
                for incoming in files
            }
            for future in as_completed(futures):
                incoming = futures[future]
                try:
                    result.succeeded.append(future.result())
                except Exception as e:  # noqa: BLE001
                    logger.warning(
                        f"Upload of '{incoming.name}' to session {session_id} failed: {e}"
                    )
                    result.failed.append(UploadFailure(name=incoming.name, reason=str(e)))

        logger.info(
            f"Session {session_id}: stored {len(result.succeeded)} file(s), "
            f"{len(result.failed)} failed"
        )
        return result
