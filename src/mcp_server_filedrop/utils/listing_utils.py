from __future__ import annotations

from ..storage_types import Item

EMPTY_LISTING = "No files uploaded."


def format_remaining(seconds: float) -> str:
    """Format a countdown the way the share page shows it, e.g. ``9m05s``."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}m{secs:02d}s"


def format_size(size_bytes: int) -> str:
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{int(size)}{unit}" if unit == "B" else f"{size:.1f}{unit}"
        size /= 1024
    return f"{size_bytes}B"  # pragma: no cover


def summarize_session_items(
    session_id: str, items: list[Item], expires_in: float | None
) -> str:
    """Return a human-readable listing of a session's files."""
    if not items:
        return EMPTY_LISTING

    lines = [f"Session {session_id}: {len(items)} file(s)"]
    if expires_in is not None:
        lines.append(f"Expires in {format_remaining(expires_in)}")
    for item in items:
        lines.append(
            f"- [{item.media_kind.value}] {item.display_name} "
            f"({format_size(item.size_bytes)}) -> {item.locator}"
        )
    return "\n".join(lines)
