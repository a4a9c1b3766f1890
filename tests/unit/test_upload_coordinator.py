"""Unit tests for UploadCoordinator."""

import threading

import pytest

from mcp_server_filedrop.errors import NoFilesSupplied, PayloadTooLarge
from mcp_server_filedrop.storage_types import IncomingFile, MediaKind
from mcp_server_filedrop.upload_coordinator import UploadCoordinator

SESSION = "0123456789abcdef"


@pytest.fixture
def coordinator(registry, flaky_store, clock):
    return UploadCoordinator(
        registry, flaky_store, max_file_bytes=100, max_workers=4, clock=clock
    )


class TestUploadCoordinator:
    """Test suite for batch admission and parallel writes."""

    def test_store_single_file(self, coordinator, registry, clock, incoming):
        """Test one file is stored and registered."""
        result = coordinator.store(SESSION, [incoming("cat.png", b"meow")])

        assert result.ok
        assert len(result.succeeded) == 1
        item = result.succeeded[0]
        assert item.display_name == "cat.png"
        assert item.session_id == SESSION
        assert item.media_kind is MediaKind.IMAGE
        assert item.size_bytes == 4
        assert item.created_at == clock()
        assert item.content_type == "image/png"
        assert registry.list_items(SESSION) == [item]

    def test_no_files_rejected(self, coordinator, registry, flaky_store):
        """Test an empty batch raises NoFilesSupplied."""
        with pytest.raises(NoFilesSupplied):
            coordinator.store(SESSION, [])
        assert not registry.has_session(SESSION)
        assert flaky_store.put_calls == 0

    def test_oversized_file_rejected_without_side_effects(
        self, coordinator, registry, flaky_store, incoming
    ):
        """Test an oversized file touches neither backend nor registry."""
        with pytest.raises(PayloadTooLarge) as exc_info:
            coordinator.store(SESSION, [incoming("big.bin", b"x" * 101)])

        assert exc_info.value.limit_bytes == 100
        assert exc_info.value.size_bytes == 101
        assert not registry.has_session(SESSION)
        assert flaky_store.put_calls == 0

    def test_file_at_limit_accepted(self, coordinator, incoming):
        """Test a file exactly at the limit is accepted."""
        result = coordinator.store(SESSION, [incoming("ok.bin", b"x" * 100)])
        assert result.ok

    def test_oversized_file_rejects_whole_batch(
        self, coordinator, registry, flaky_store, incoming
    ):
        """Test one oversized file rejects the batch."""
        with pytest.raises(PayloadTooLarge):
            coordinator.store(
                SESSION, [incoming("a.txt", b"a"), incoming("big.bin", b"x" * 101)]
            )
        assert registry.list_items(SESSION) is None
        assert flaky_store.put_calls == 0

    def test_partial_failure_is_isolated(
        self, coordinator, registry, flaky_store, incoming
    ):
        """Test a backend failure only affects its own file."""
        flaky_store.fail_put_names = {"2.txt"}
        files = [incoming("1.txt", b"one"), incoming("2.txt", b"two"), incoming("3.txt", b"3")]

        result = coordinator.store(SESSION, files)

        assert sorted(item.display_name for item in result.succeeded) == ["1.txt", "3.txt"]
        assert [f.name for f in result.failed] == ["2.txt"]
        assert "backend rejected" in result.failed[0].reason
        assert not result.ok
        listed = registry.list_items(SESSION)
        assert sorted(item.display_name for item in listed) == ["1.txt", "3.txt"]

    def test_all_failed_leaves_empty_session(self, coordinator, registry, flaky_store, incoming):
        """Test a fully failed batch still registers the session."""
        flaky_store.fail_put_names = {"a.txt"}
        result = coordinator.store(SESSION, [incoming("a.txt", b"a")])

        assert result.succeeded == []
        assert registry.list_items(SESSION) == []

    def test_concurrent_stores_into_same_session(self, coordinator, registry, incoming):
        """Test parallel uploads to one session all land."""
        n = 12
        barrier = threading.Barrier(n)
        errors = []

        def upload(i: int) -> None:
            try:
                barrier.wait()
                result = coordinator.store(SESSION, [incoming(f"f{i}.txt", b"data")])
                assert result.ok
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=upload, args=(i,)) for i in range(n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        items = registry.list_items(SESSION)
        assert len(items) == n
        assert {item.display_name for item in items} == {f"f{i}.txt" for i in range(n)}

    def test_content_type_guessed_from_name(self, coordinator, incoming):
        """Test the content type is guessed when omitted."""
        result = coordinator.store(SESSION, [incoming("doc.pdf", b"%PDF")])
        item = result.succeeded[0]
        assert item.content_type == "application/pdf"
        assert item.media_kind is MediaKind.DOCUMENT

    def test_explicit_content_type_wins(self, coordinator):
        """Test a supplied content type is kept."""
        result = coordinator.store(
            SESSION, [IncomingFile(name="clip", content_type="video/mp4", data=b"v")]
        )
        item = result.succeeded[0]
        assert item.content_type == "video/mp4"
        assert item.media_kind is MediaKind.VIDEO
