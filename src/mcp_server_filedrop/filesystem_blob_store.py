"""
Filesystem Blob Store

Stores each payload as a plain file below a root directory:

    <root>/<session_id>/<item_id>/<safe file name>

Writes go to a temporary file under ``<root>/.tmp`` first and are moved into
the item directory with ``os.replace``, so an item directory only ever holds
one complete file.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
from pathlib import Path
from urllib.parse import quote

import psutil

from .base_blob_store import BlobStore
from .errors import BlobDeleteError, BlobStoreError
from .storage_types import Item, StoredBlob
from .utils.media_utils import classify_media, safe_file_name

logger = logging.getLogger(__name__)


class FilesystemBlobStore(BlobStore):
    """Local-disk BlobStore keyed by session directory."""

    def __init__(self, root_dir: str | os.PathLike[str]) -> None:
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)
        # Partial writes live here; session ids are hex so this never clashes
        self._tmp_dir = self._root / ".tmp"
        self._tmp_dir.mkdir(exist_ok=True)

    @property
    def root_dir(self) -> Path:
        return self._root

    def _session_dir(self, session_id: str) -> Path:
        return self._root / session_id

    def _item_dir(self, session_id: str, item_id: str) -> Path:
        return self._session_dir(session_id) / item_id

    def put(
        self, session_id: str, name: str, content_type: str, data: bytes
    ) -> StoredBlob:
        item_id = uuid.uuid4().hex[:12]
        file_name = safe_file_name(name)
        item_dir = self._item_dir(session_id, item_id)
        tmp_path: str | None = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self._tmp_dir, prefix="upload-")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            item_dir.mkdir(parents=True, exist_ok=True)
            os.replace(tmp_path, item_dir / file_name)
            tmp_path = None
        except OSError as e:
            shutil.rmtree(item_dir, ignore_errors=True)
            raise BlobStoreError(f"Failed to write '{file_name}': {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        return StoredBlob(
            id=item_id,
            locator=f"/{session_id}/{item_id}/{quote(file_name)}",
            size_bytes=len(data),
            media_kind=classify_media(name, content_type),
        )

    def read(self, session_id: str, item_id: str) -> bytes:
        item_dir = self._item_dir(session_id, item_id)
        if not item_dir.is_dir():
            raise KeyError(item_id)
        # An item directory only ever holds its one finished file
        stored = next(item_dir.iterdir(), None)
        if stored is None:
            raise KeyError(item_id)
        return stored.read_bytes()

    def delete(self, item: Item) -> None:
        item_dir = self._item_dir(item.session_id, item.id)
        try:
            shutil.rmtree(item_dir)
        except FileNotFoundError:
            # Already gone
            return
        except OSError as e:
            raise BlobDeleteError(f"Failed to delete {item_dir}: {e}") from e

    def prune_session(self, session_id: str) -> None:
        session_dir = self._session_dir(session_id)
        try:
            session_dir.rmdir()
        except FileNotFoundError:
            return
        except OSError as e:
            # Not empty: an upload landed after the session was emptied
            logger.debug(f"Keeping session dir {session_dir}: {e}")

    def disk_usage_percent(self) -> float:
        try:
            return float(psutil.disk_usage(str(self._root)).percent)
        except Exception:
            return 0.0
