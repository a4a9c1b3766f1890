"""
Session Metadata

This module contains the SessionRecord class used by the SessionRegistry
to track a session's creation time and its items.
"""

from dataclasses import dataclass, field

from .storage_types import Item


@dataclass
class SessionRecord:
    """Registry entry for one session."""

    session_id: str
    created_at: float
    items: list[Item] = field(default_factory=list)  # completion order

    @property
    def total_size_bytes(self) -> int:
        return sum(item.size_bytes for item in self.items)

    def snapshot(self) -> "SessionRecord":
        """Copy that callers can hold without seeing later mutations."""
        return SessionRecord(
            session_id=self.session_id,
            created_at=self.created_at,
            items=list(self.items),
        )
