"""
File Drop Settings

All tunables are read from ``FILEDROP_*`` environment variables. Values that
fail to parse fall back to their defaults.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Mapping

logger = logging.getLogger(__name__)

ENV_PREFIX = "FILEDROP_"
BLOB_BACKENDS = ("filesystem", "diskcache")


def _default_blob_dir() -> str:
    return os.path.join(tempfile.gettempdir(), "files")


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid {ENV_PREFIX}{name}={raw!r}; using {default}")
        return default
    if value <= 0:
        logger.warning(f"{ENV_PREFIX}{name} must be positive; using {default}")
        return default
    return value


def _read_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class FileDropSettings:
    ttl_seconds: int = 10 * 60  # 10 minutes
    sweep_interval_seconds: int = 60
    max_file_bytes: int = 100 * 1024 * 1024  # 100MB
    session_token_bytes: int = 8
    accept_unknown_tokens: bool = True
    blob_backend: str = "filesystem"
    blob_dir: str = field(default_factory=_default_blob_dir)
    upload_workers: int = 4

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "FileDropSettings":
        env = os.environ if env is None else env
        defaults = cls()

        backend = env.get(ENV_PREFIX + "BLOB_BACKEND", defaults.blob_backend).strip().lower()
        if backend not in BLOB_BACKENDS:
            logger.warning(
                f"Unknown {ENV_PREFIX}BLOB_BACKEND={backend!r}; using {defaults.blob_backend}"
            )
            backend = defaults.blob_backend

        return cls(
            ttl_seconds=_read_int(env, "TTL_SECONDS", defaults.ttl_seconds),
            sweep_interval_seconds=_read_int(
                env, "SWEEP_INTERVAL_SECONDS", defaults.sweep_interval_seconds
            ),
            max_file_bytes=_read_int(env, "MAX_FILE_BYTES", defaults.max_file_bytes),
            session_token_bytes=_read_int(
                env, "SESSION_TOKEN_BYTES", defaults.session_token_bytes
            ),
            accept_unknown_tokens=_read_bool(
                env, "ACCEPT_UNKNOWN_TOKENS", defaults.accept_unknown_tokens
            ),
            blob_backend=backend,
            blob_dir=env.get(ENV_PREFIX + "BLOB_DIR") or defaults.blob_dir,
            upload_workers=_read_int(env, "UPLOAD_WORKERS", defaults.upload_workers),
        )
