"""
Session Manager

Issues session ids and decides whether a token presented by a client can be
used as one. The same id is used as a URL path segment and as the registry
key, so only strings matching the fixed-length hex format are ever trusted.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from cacheout import Cache

from .session_registry import SessionRegistry
from .utils.session_utils import (
    DEFAULT_TOKEN_BYTES,
    is_valid_session_id,
    new_session_id,
)

logger = logging.getLogger(__name__)


class SessionManager:
    """Resolve client tokens to session ids, minting new ones when needed."""

    def __init__(
        self,
        registry: SessionRegistry,
        ttl_seconds: float = 600,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        accept_unknown_tokens: bool = True,
        max_pending: int = 100_000,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._registry = registry
        self._token_bytes = token_bytes
        self._accept_unknown_tokens = accept_unknown_tokens
        # Ids handed out but not yet written to; forgotten after one TTL
        self._issued = Cache(
            maxsize=max_pending, ttl=ttl_seconds, timer=clock or time.time
        )

    @property
    def accept_unknown_tokens(self) -> bool:
        return self._accept_unknown_tokens

    @property
    def token_bytes(self) -> int:
        return self._token_bytes

    def is_valid(self, token: object) -> bool:
        return is_valid_session_id(token, self._token_bytes)

    def is_known(self, session_id: str) -> bool:
        """True when the registry holds the session or it is pending first use."""
        return self._registry.has_session(session_id) or self._issued.has(session_id)

    def resolve(self, token: str | None = None) -> str:
        """
        Return the session id to use for a request.

        A well-formed token is kept when it is known, or when unknown tokens
        are accepted. Anything else (missing, malformed, or unknown in strict
        mode) gets a freshly minted id; this never raises.
        """
        if token is not None and self.is_valid(token):
            if self._accept_unknown_tokens or self.is_known(token):
                return token
            logger.info(f"Ignoring unknown session token {token}")
        elif token:
            logger.debug("Ignoring malformed session token")
        return self.mint()

    def mint(self) -> str:
        """Generate an id unique among live and pending sessions."""
        while True:
            session_id = new_session_id(self._token_bytes)
            if not self.is_known(session_id):
                break
            logger.warning(f"Session id collision on {session_id}; retrying")
        self._issued.set(session_id, True)
        return session_id
