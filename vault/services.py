"""Contracts of the external identity and object storage services."""

from typing import Callable, List, Protocol

from common.constants import SESSION_REF_CURRENT
from common.types import FileRecord, LocalFile, Session, TransferSnapshot

ProgressCallback = Callable[[TransferSnapshot], None]


class IdentityService(Protocol):
    """Credential management backend."""

    async def get_current_session(self) -> Session:
        """Return the active session; raise UnauthenticatedError if there is none."""
        ...

    async def create_session(self, email: str, password: str) -> Session:
        """Exchange credentials for a session; raise InvalidCredentialsError on mismatch."""
        ...

    async def create_identity(self, user_id: str, email: str, password: str, name: str) -> str:
        """Create an identity and return its id; raise AlreadyExistsError if taken."""
        ...

    async def destroy_session(self, session_ref: str = SESSION_REF_CURRENT) -> None:
        ...


class ObjectStorageService(Protocol):
    """Durable file storage backend scoped by bucket."""

    async def list(self, bucket_id: str) -> List[FileRecord]:
        ...

    async def create(
        self,
        bucket_id: str,
        file_id: str,
        source: LocalFile,
        on_progress: ProgressCallback,
    ) -> FileRecord:
        ...

    async def delete(self, bucket_id: str, file_id: str) -> None:
        """Delete one object; raise NotFoundError if it does not exist."""
        ...

    async def get(self, bucket_id: str, file_id: str) -> FileRecord:
        """Fetch metadata; raise NotFoundError if it does not exist."""
        ...

    def download_url(self, bucket_id: str, file_id: str) -> str:
        ...

    def preview_url(self, bucket_id: str, file_id: str, width: int, height: int) -> str:
        ...
