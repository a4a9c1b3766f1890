"""
File Drop Errors

Caller-visible rejections (``SessionNotFound``, ``PayloadTooLarge``,
``NoFilesSupplied``) are raised to the tool layer. Backend failures are
reported per file or logged by the sweeper and never reach a caller.
"""


class FileDropError(Exception):
    """Base class for all file drop errors."""


class InvalidSessionId(FileDropError, ValueError):
    """A session token does not match the session id format."""


class SessionNotFound(FileDropError, LookupError):
    """The session was never created or has already expired."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session '{session_id}' not found or expired")
        self.session_id = session_id


class ItemNotFound(FileDropError, LookupError):
    """The item is not registered in the session (or has expired)."""

    def __init__(self, session_id: str, item_id: str) -> None:
        super().__init__(f"File '{item_id}' not found in session '{session_id}'")
        self.session_id = session_id
        self.item_id = item_id


class PayloadTooLarge(FileDropError):
    """A file exceeds the configured per-file byte ceiling."""

    def __init__(self, name: str, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(
            f"File '{name}' is {size_bytes} bytes, limit is {limit_bytes} bytes"
        )
        self.name = name
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class NoFilesSupplied(FileDropError):
    """An upload request carried no files."""

    def __init__(self) -> None:
        super().__init__("No files supplied")


class BlobStoreError(FileDropError):
    """The blob backend failed to persist a payload."""


class BlobDeleteError(FileDropError):
    """The blob backend failed to delete a payload."""
