"""
Eviction Sweeper

Periodically removes expired items from the registry and deletes their blobs.

``sweep_once`` is the unit of work and can be called directly (tests, the
``sweep_now`` tool); ``start`` runs it on a daemon thread every
``interval_seconds`` until ``stop`` is called.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from .base_blob_store import BlobStore
from .session_registry import SessionRegistry
from .storage_types import Item
from .system_utils import log_system_status

logger = logging.getLogger(__name__)


class EvictionSweeper:
    """Background TTL enforcement for a SessionRegistry and its BlobStore."""

    def __init__(
        self,
        registry: SessionRegistry,
        blob_store: BlobStore,
        ttl_seconds: float = 600,
        interval_seconds: float = 60,
        clock: Callable[[], float] | None = None,
        log_status: bool = True,
    ) -> None:
        self._registry = registry
        self._blob_store = blob_store
        self._ttl_seconds = ttl_seconds
        self._interval_seconds = interval_seconds
        self._clock = clock or time.time
        self._log_status = log_status

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        # Serializes sweeps so a manual sweep and a timer tick never overlap
        self._sweep_lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sweep_once(self, now: float | None = None) -> list[Item]:
        """
        Evict expired items and delete their blobs.

        The registry lock is held only while the removed items are collected;
        backend deletes run afterwards. A failed delete is logged and the
        item stays removed.

        Returns:
            The items removed from the registry
        """
        with self._sweep_lock:
            now = self._clock() if now is None else now
            removed = self._registry.evict_expired(now, self._ttl_seconds)

            emptied: set[str] = set()
            for item in removed:
                try:
                    self._blob_store.delete(item)
                except Exception as e:  # noqa: BLE001
                    logger.error(
                        f"Failed to delete blob {item.id} ({item.locator}) "
                        f"of session {item.session_id}: {e}"
                    )
                emptied.add(item.session_id)

            for session_id in emptied:
                if self._registry.has_session(session_id):
                    continue
                try:
                    self._blob_store.prune_session(session_id)
                except Exception as e:  # noqa: BLE001
                    logger.error(f"Failed to prune session {session_id}: {e}")

        if removed:
            logger.info(
                f"Sweep removed {len(removed)} item(s) from {len(emptied)} session(s)"
            )
        return removed

    def _tick(self) -> None:
        try:
            self.sweep_once()
            if self._log_status:
                log_system_status(
                    self._blob_store.__class__.__name__,
                    self._blob_store.disk_usage_percent(),
                )
        except Exception:  # noqa: BLE001
            logger.exception("Sweep failed; will retry on next tick")

    def _run(self) -> None:
        logger.info(
            f"Eviction sweeper started (ttl={self._ttl_seconds}s, "
            f"interval={self._interval_seconds}s)"
        )
        while not self._stop_event.wait(self._interval_seconds):
            self._tick()
        logger.info("Eviction sweeper stopped")

    def start(self) -> None:
        """Start the background thread; a no-op if it is already running."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="filedrop-sweeper", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
