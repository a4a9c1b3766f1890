"""
Session Registry

Authoritative record of which sessions exist, which items they hold and when
each item was created. The registry is the only shared mutable state of the
file drop and the only component that knows about expiry.

Design notes:
- One OrderedDict keyed by session_id, guarded by a single re-entrant lock.
- Every mutation (ensure, append, evict, remove) runs inside the lock; reads
  return copies so callers never observe a list that is being mutated.
- No I/O happens under the lock. Blob writes finish before ``append_item`` is
  called and blob deletes happen after ``evict_expired`` returns.
- The clock is injected so tests can drive time explicitly.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable

from .session_metadata import SessionRecord
from .storage_types import Item

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Guarded map of session_id -> SessionRecord."""

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.time
        self._sessions: OrderedDict[str, SessionRecord] = OrderedDict()
        # Re-entrant so helpers can be called from already-locked methods
        self._lock = threading.RLock()

    # Internal helpers
    def _now(self) -> float:
        return self._clock()

    def _ensure_record(self, session_id: str) -> SessionRecord:
        record = self._sessions.get(session_id)
        if record is None:
            record = SessionRecord(session_id=session_id, created_at=self._now())
            self._sessions[session_id] = record
            logger.debug(f"Created session {session_id}")
        return record

    # Mutations
    def ensure_session(self, session_id: str) -> None:
        """Create an empty session stamped with the current time, if absent."""
        with self._lock:
            self._ensure_record(session_id)

    def append_item(self, session_id: str, item: Item) -> None:
        """
        Append a completed item to its session.

        The session is (re)created when missing, so an upload that finished
        after a sweep removed its empty session is still recorded.
        """
        if item.session_id != session_id:
            raise ValueError(
                f"Item {item.id} belongs to session {item.session_id}, not {session_id}"
            )
        with self._lock:
            record = self._ensure_record(session_id)
            record.items.append(item)

    def evict_expired(self, now: float, ttl_seconds: float) -> list[Item]:
        """
        Remove every item older than ``ttl_seconds`` at time ``now``.

        Sessions left without items are dropped, as are never-populated
        sessions whose own age exceeds the TTL.

        Returns:
            The removed items, so the caller can delete their blobs
        """
        removed: list[Item] = []
        with self._lock:
            for session_id in list(self._sessions.keys()):
                record = self._sessions[session_id]
                if record.items:
                    retained = []
                    for item in record.items:
                        if now - item.created_at > ttl_seconds:
                            removed.append(item)
                        else:
                            retained.append(item)
                    record.items = retained
                    if not retained:
                        del self._sessions[session_id]
                elif now - record.created_at > ttl_seconds:
                    del self._sessions[session_id]
        return removed

    def remove_session(self, session_id: str) -> list[Item]:
        """Drop a session regardless of age and return its items."""
        with self._lock:
            record = self._sessions.pop(session_id, None)
        if record is None:
            return []
        return list(record.items)

    # Reads
    def list_items(
        self, session_id: str, ttl_seconds: float | None = None
    ) -> list[Item] | None:
        """
        Return the session's items, or None if the session does not exist.

        With ``ttl_seconds`` given, items that have outlived the TTL but not
        yet been swept are hidden, and a session with nothing left to show
        is reported as missing.
        """
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                return None
            if ttl_seconds is None:
                return list(record.items)

            now = self._now()
            if not record.items:
                if now - record.created_at > ttl_seconds:
                    return None
                return []
            live = [i for i in record.items if now - i.created_at <= ttl_seconds]
            return live or None

    def get_item(self, session_id: str, item_id: str) -> Item | None:
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                return None
            for item in record.items:
                if item.id == item_id:
                    return item
            return None

    def get_session(self, session_id: str) -> SessionRecord | None:
        with self._lock:
            record = self._sessions.get(session_id)
            return record.snapshot() if record is not None else None

    def has_session(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions.keys())

    def expires_at(self, session_id: str, ttl_seconds: float) -> float | None:
        """
        Time at which the session stops being listable.

        For a populated session that is when its newest item expires; for an
        empty one it is the session's own expiry.
        """
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                return None
            if record.items:
                return max(item.created_at for item in record.items) + ttl_seconds
            return record.created_at + ttl_seconds

    def stats(self) -> tuple[int, int, int]:
        """Return (session count, item count, total bytes)."""
        with self._lock:
            total_items = 0
            total_size_bytes = 0
            for record in self._sessions.values():
                total_items += len(record.items)
                total_size_bytes += record.total_size_bytes
            return len(self._sessions), total_items, total_size_bytes

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
