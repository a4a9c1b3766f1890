"""
Abstract Base Blob Store

This module contains the abstract base class that defines the interface
for all blob storage backends.
"""

from abc import ABC, abstractmethod

from .storage_types import Item, StoredBlob


class BlobStore(ABC):
    """
    Abstract base class for session-scoped blob storage.

    The UploadCoordinator and EvictionSweeper use this interface to write and
    delete payloads without knowing the underlying storage mechanism.

    The interface is designed so that:
    - Backends compute their own internal key or path from the session id
    - A write is either complete or absent; ``put`` returns only once the
      payload is fully persisted
    - Backends have no notion of expiry; the SessionRegistry owns the clock
    """

    @abstractmethod
    def put(
        self, session_id: str, name: str, content_type: str, data: bytes
    ) -> StoredBlob:
        """
        Persist a payload for a session.

        Args:
            session_id: The session identifier
            name: Client-supplied file name (untrusted)
            content_type: Resolved content type of the payload
            data: The payload bytes

        Returns:
            StoredBlob describing the persisted payload

        Raises:
            BlobStoreError: If the payload could not be persisted
        """
        pass

    @abstractmethod
    def read(self, session_id: str, item_id: str) -> bytes:
        """
        Read a payload back.

        Args:
            session_id: The session identifier
            item_id: The id returned by ``put``

        Returns:
            The payload bytes

        Raises:
            KeyError: If no payload is stored under the id
        """
        pass

    @abstractmethod
    def delete(self, item: Item) -> None:
        """
        Delete the payload backing an item.

        Args:
            item: The item whose blob should be removed

        Raises:
            BlobDeleteError: If the backend failed to delete the payload
        """
        pass

    def prune_session(self, session_id: str) -> None:
        """Release per-session resources once the session holds no items."""
        return None

    @abstractmethod
    def disk_usage_percent(self) -> float:
        """Return usage of the volume backing this store, in percent."""
        pass

    def close(self) -> None:
        """Release backend resources."""
        return None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
