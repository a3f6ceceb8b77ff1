"""Pydantic schemas for share gateway responses."""

from typing import Optional

from pydantic import BaseModel

from vault.share_resolver import SharedFile


class SharedFileResponse(BaseModel):
    """Public view of a shared file."""
    file_id: str
    name: str
    mime_type: str
    size: int
    created_at: str
    share_url: str
    download_url: str
    preview_url: Optional[str] = None

    @classmethod
    def from_shared(cls, shared: SharedFile, share_url: str) -> "SharedFileResponse":
        record = shared.record
        return cls(
            file_id=record.file_id,
            name=record.name,
            mime_type=record.mime_type,
            size=record.size,
            created_at=record.created_at.isoformat(),
            share_url=share_url,
            download_url=shared.download_url,
            preview_url=shared.preview_url,
        )


class ErrorResponse(BaseModel):
    detail: str
    code: str
