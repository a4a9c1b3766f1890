"""Unit tests for FileDropSettings."""

import os
import tempfile

from mcp_server_filedrop.config import FileDropSettings


class TestFileDropSettings:
    """Test suite for environment-driven settings."""

    def test_defaults(self):
        """Test defaults with an empty environment."""
        settings = FileDropSettings.from_env({})

        assert settings.ttl_seconds == 600
        assert settings.sweep_interval_seconds == 60
        assert settings.max_file_bytes == 100 * 1024 * 1024
        assert settings.session_token_bytes == 8
        assert settings.accept_unknown_tokens is True
        assert settings.blob_backend == "filesystem"
        assert settings.blob_dir == os.path.join(tempfile.gettempdir(), "files")
        assert settings.upload_workers == 4

    def test_overrides(self):
        """Test FILEDROP_* variables override defaults."""
        settings = FileDropSettings.from_env(
            {
                "FILEDROP_TTL_SECONDS": "300",
                "FILEDROP_SWEEP_INTERVAL_SECONDS": "5",
                "FILEDROP_MAX_FILE_BYTES": "2048",
                "FILEDROP_SESSION_TOKEN_BYTES": "12",
                "FILEDROP_ACCEPT_UNKNOWN_TOKENS": "false",
                "FILEDROP_BLOB_BACKEND": "DiskCache",
                "FILEDROP_BLOB_DIR": "/srv/drop",
                "FILEDROP_UPLOAD_WORKERS": "8",
            }
        )

        assert settings.ttl_seconds == 300
        assert settings.sweep_interval_seconds == 5
        assert settings.max_file_bytes == 2048
        assert settings.session_token_bytes == 12
        assert settings.accept_unknown_tokens is False
        assert settings.blob_backend == "diskcache"
        assert settings.blob_dir == "/srv/drop"
        assert settings.upload_workers == 8

    def test_invalid_values_fall_back(self):
        """Test unparsable values fall back to defaults."""
        settings = FileDropSettings.from_env(
            {
                "FILEDROP_TTL_SECONDS": "ten minutes",
                "FILEDROP_MAX_FILE_BYTES": "-1",
                "FILEDROP_BLOB_BACKEND": "s3",
            }
        )

        assert settings.ttl_seconds == 600
        assert settings.max_file_bytes == 100 * 1024 * 1024
        assert settings.blob_backend == "filesystem"
