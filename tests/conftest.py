"""Shared pytest fixtures for file drop tests."""

import threading

import pytest

from mcp_server_filedrop.base_blob_store import BlobStore
from mcp_server_filedrop.config import FileDropSettings
from mcp_server_filedrop.errors import BlobDeleteError, BlobStoreError
from mcp_server_filedrop.file_drop import FileDrop
from mcp_server_filedrop.filesystem_blob_store import FilesystemBlobStore
from mcp_server_filedrop.session_registry import SessionRegistry
from mcp_server_filedrop.storage_types import IncomingFile

START_TIME = 1_700_000_000.0


class FakeClock:
    """Manually advanced clock, callable like time.time."""

    def __init__(self, start: float = START_TIME):
        self._now = start
        self._lock = threading.Lock()

    def __call__(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> None:
        with self._lock:
            self._now += seconds


class FlakyBlobStore(BlobStore):
    """Wraps a real store; fails writes or deletes for selected files."""

    def __init__(self, inner: BlobStore):
        self.inner = inner
        self.fail_put_names: set[str] = set()
        self.fail_delete_ids: set[str] = set()
        self.put_calls = 0
        self.delete_calls = 0
        self._lock = threading.Lock()

    def put(self, session_id, name, content_type, data):
        with self._lock:
            self.put_calls += 1
        if name in self.fail_put_names:
            raise BlobStoreError(f"backend rejected {name}")
        return self.inner.put(session_id, name, content_type, data)

    def read(self, session_id, item_id):
        return self.inner.read(session_id, item_id)

    def delete(self, item):
        with self._lock:
            self.delete_calls += 1
        if item.id in self.fail_delete_ids:
            raise BlobDeleteError(f"backend could not delete {item.id}")
        self.inner.delete(item)

    def prune_session(self, session_id):
        self.inner.prune_session(session_id)

    def disk_usage_percent(self):
        return 0.0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return SessionRegistry(clock=clock)


@pytest.fixture
def fs_store(tmp_path):
    return FilesystemBlobStore(tmp_path / "files")


@pytest.fixture
def flaky_store(fs_store):
    return FlakyBlobStore(fs_store)


@pytest.fixture
def settings(tmp_path):
    return FileDropSettings(
        ttl_seconds=300,
        sweep_interval_seconds=60,
        max_file_bytes=1024,
        blob_dir=str(tmp_path / "files"),
    )


@pytest.fixture
def file_drop(settings, flaky_store, clock):
    drop = FileDrop(settings=settings, blob_store=flaky_store, clock=clock)
    # Keep sweeps quiet; no psutil logging from tests
    drop.sweeper._log_status = False
    yield drop
    drop.close()


@pytest.fixture
def session_id():
    return "0123456789abcdef"


def make_file(name: str = "photo.png", data: bytes = b"payload", content_type=None):
    return IncomingFile(name=name, content_type=content_type, data=data)


@pytest.fixture
def incoming():
    """Factory for IncomingFile objects."""
    return make_file
