from __future__ import annotations

import re
import secrets

from ..errors import InvalidSessionId

DEFAULT_TOKEN_BYTES = 8

_PATTERNS: dict[int, re.Pattern[str]] = {}


def session_id_pattern(token_bytes: int = DEFAULT_TOKEN_BYTES) -> re.Pattern[str]:
    """Return the compiled pattern for ids minted from ``token_bytes`` random bytes."""
    pattern = _PATTERNS.get(token_bytes)
    if pattern is None:
        pattern = re.compile(rf"[0-9a-f]{{{token_bytes * 2}}}")
        _PATTERNS[token_bytes] = pattern
    return pattern


def is_valid_session_id(
    session_id: object, token_bytes: int = DEFAULT_TOKEN_BYTES
) -> bool:
    """True when ``session_id`` is a fixed-length lowercase hex string."""
    if not isinstance(session_id, str):
        return False
    return session_id_pattern(token_bytes).fullmatch(session_id) is not None


def validate_session_id(
    session_id: str | None, token_bytes: int = DEFAULT_TOKEN_BYTES
) -> str:
    """Return ``session_id`` unchanged or raise InvalidSessionId.

    No normalization happens: an id read from a URL must match exactly what
    was issued, so case or whitespace differences are rejected.
    """
    if session_id is None or session_id == "":
        raise InvalidSessionId("session_id is required")
    if not is_valid_session_id(session_id, token_bytes):
        raise InvalidSessionId(
            f"session_id must be {token_bytes * 2} lowercase hex characters"
        )
    return session_id


def new_session_id(token_bytes: int = DEFAULT_TOKEN_BYTES) -> str:
    return secrets.token_hex(token_bytes)
