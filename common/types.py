"""Shared data type definitions (Session, FileRecord, TransferSnapshot, etc.)."""

import mimetypes
import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from common.constants import DEFAULT_MIME_TYPE


@dataclass(frozen=True)
class Session:
    """
    Active login state of one identity.
    """
    session_id: str
    user_id: str
    name: str
    email: str


@dataclass(frozen=True)
class FileRecord:
    """
    Metadata for one stored object, excluding its bytes.
    """
    file_id: str
    name: str
    mime_type: str
    size: int
    created_at: datetime
    bucket_id: str

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


@dataclass(frozen=True)
class TransferSnapshot:
    """
    Progress of an upload in storage transfer units (chunks).
    """
    transferred: int
    total: int

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.transferred / self.total * 100)


@dataclass(frozen=True)
class LocalFile:
    """
    A file selected on the local filesystem for upload.
    """
    path: Path
    name: str
    size: int
    mime_type: str

    @classmethod
    def from_path(cls, path) -> "LocalFile":
        """
        Build a LocalFile from a filesystem path.

        Raises:
            OSError: If the path cannot be stat'ed
            IsADirectoryError: If the path is not a regular file
        """
        path = Path(path).expanduser()
        if not path.is_file():
            if path.exists():
                raise IsADirectoryError(f"Not a file: {path}")
            raise FileNotFoundError(f"File not found: {path}")
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            path=path,
            name=path.name,
            size=os.path.getsize(path),
            mime_type=mime_type or DEFAULT_MIME_TYPE,
        )


class SessionStatus(str, Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class Invalidation(str, Enum):
    """What a mutating operation did to the cached listing."""
    PATCHED = "patched"
    REFRESHED = "refreshed"
    STALE = "stale"


@dataclass(frozen=True)
class MutationResult:
    file_id: str
    invalidation: Invalidation


@dataclass(frozen=True)
class Listing:
    """
    Snapshot of the visible file set.

    A failed fetch is an empty listing with failed=True and the service
    message, so the front end can offer a retry instead of crashing.
    """
    records: Tuple[FileRecord, ...] = ()
    failed: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class LogoutResult:
    revoked: bool
    error: Optional[str] = None
