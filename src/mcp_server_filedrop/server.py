import base64
import binascii
import logging
import sys
from typing import Any

# FastMCP 2.0 import
from fastmcp import FastMCP

from .file_drop import FileDrop
from .storage_types import IncomingFile

logger = logging.getLogger(__name__)
# Ensure package logs are visible in the FastMCP subprocess even if no handlers configured
_package_logger = logging.getLogger(__package__)
if not _package_logger.handlers:
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setLevel(logging.INFO)
    _formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    _handler.setFormatter(_formatter)
    _package_logger.addHandler(_handler)
_package_logger.setLevel(logging.INFO)

# Create FastMCP instance
mcp = FastMCP("File Drop 📂")

# Global file drop instance; the sweeper thread is started by main()
file_drop = FileDrop()


def decode_content(file_name: str, content_base64: str) -> bytes:
    """Decode a base64 payload, naming the file in the error."""
    try:
        return base64.b64decode(content_base64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Content of '{file_name}' is not valid base64: {e}")


def build_incoming_files(files: list[dict[str, Any]]) -> list[IncomingFile]:
    """Turn tool-call file entries into IncomingFile objects.

    Each entry needs "file_name" and "content_base64"; "content_type" is
    optional. A malformed entry rejects the whole batch before anything is
    stored.
    """
    incoming = []
    for index, entry in enumerate(files):
        file_name = entry.get("file_name")
        if not file_name or not isinstance(file_name, str):
            raise ValueError(f"File entry {index} is missing 'file_name'")
        content_base64 = entry.get("content_base64")
        if not isinstance(content_base64, str):
            raise ValueError(f"File '{file_name}' is missing 'content_base64'")
        incoming.append(
            IncomingFile(
                name=file_name,
                content_type=entry.get("content_type"),
                data=decode_content(file_name, content_base64),
            )
        )
    return incoming


# === TOOLS ===
@mcp.tool
def resolve_session(token: str | None = None) -> str:
    """Return the session id to use, minting a new one if the token is unusable.

    Args:
        token: Session id previously issued to the client, if any

    Returns:
        A session id (16 lowercase hex characters by default)
    """
    return file_drop.resolve_session(token)


@mcp.tool
def session_url(session_id: str, base_url: str) -> str:
    """Build the shareable URL of a session's file listing."""
    return file_drop.session_url(session_id, base_url)


@mcp.tool
def upload_file(
    session_id: str,
    file_name: str,
    content_base64: str,
    content_type: str | None = None,
) -> dict[str, Any]:
    """Store one file in a session; it expires after the configured TTL.

    Args:
        session_id: Session id from resolve_session
        file_name: Original file name
        content_base64: File content, base64-encoded
        content_type: Optional MIME type; guessed from the name when omitted

    Returns:
        {"succeeded": [...], "failed": [...]}
    """
    files = build_incoming_files(
        [
            {
                "file_name": file_name,
                "content_base64": content_base64,
                "content_type": content_type,
            }
        ]
    )
    return file_drop.upload(session_id, files).to_dict()


@mcp.tool
def upload_files(session_id: str, files: list[dict[str, Any]]) -> dict[str, Any]:
    """Store several files in a session in one request.

    Files are written in parallel; a backend failure on one file is reported
    under "failed" while the rest are still stored.

    Args:
        session_id: Session id from resolve_session
        files: Entries of {"file_name", "content_base64", "content_type"},
            where content_type is optional

    Returns:
        {"succeeded": [...], "failed": [...]}
    """
    return file_drop.upload(session_id, build_incoming_files(files)).to_dict()


@mcp.tool
def list_files(session_id: str) -> list[dict[str, Any]]:
    """List the unexpired files of a session.

    Raises an error when the session is unknown or has expired.
    """
    return [item.to_dict() for item in file_drop.list_files(session_id)]


@mcp.tool
def sweep_now() -> list[dict[str, Any]]:
    """Run one eviction pass immediately and return what it removed."""
    return [item.to_dict() for item in file_drop.sweep_once()]


# === RESOURCES ===
@mcp.resource("file-drop://sessions/{session_id}")
def get_session_listing(session_id: str) -> str:
    """Human-readable listing of a session's files and its time remaining."""
    return file_drop.render_listing(session_id.strip())


# === MAIN ENTRY POINT ===
def main():
    """Main entry point for the FastMCP 2.0 server."""
    logger.info("Starting FastMCP 2.0 file drop server")
    file_drop.start()
    try:
        mcp.run()
    finally:
        file_drop.close()


if __name__ == "__main__":
    main()
