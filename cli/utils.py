"""Formatting helpers for CLI output."""

from datetime import datetime

from cli.constants import GREEN, RESET
from common.types import FileRecord, TransferSnapshot

FILE_ICONS = {
    "image": "🖼",
    "video": "🎬",
    "audio": "🎵",
    "pdf": "📄",
    "zip": "🗜",
    "text": "📝",
    "default": "📦",
}


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes as B, KB or MB with one decimal.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "512 B", "10.0 KB", "3.4 MB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def format_date(value: datetime) -> str:
    return value.strftime("%b %d, %Y").replace(" 0", " ")


def file_icon(mime_type: str) -> str:
    if not mime_type:
        return FILE_ICONS["default"]
    if mime_type.startswith("image/"):
        return FILE_ICONS["image"]
    if mime_type.startswith("video/"):
        return FILE_ICONS["video"]
    if mime_type.startswith("audio/"):
        return FILE_ICONS["audio"]
    if mime_type == "application/pdf":
        return FILE_ICONS["pdf"]
    if "zip" in mime_type or "compressed" in mime_type:
        return FILE_ICONS["zip"]
    if mime_type.startswith("text/"):
        return FILE_ICONS["text"]
    return FILE_ICONS["default"]


def format_record(record: FileRecord) -> str:
    return (
        f"  {file_icon(record.mime_type)} {record.name} (ID: {record.file_id})\n"
        f"    Size: {format_file_size(record.size)}  Type: {record.mime_type}\n"
        f"    Uploaded: {format_date(record.created_at)}"
    )


def format_progress(label: str, snapshot: TransferSnapshot) -> str:
    """Render one progress line, meant to be written after a carriage return."""
    return f"\r{label}: {GREEN}{snapshot.percent}%{RESET}"
