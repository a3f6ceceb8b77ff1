"""The authenticated user's visible file set."""

from typing import Optional, Tuple

from common.exceptions import (
    NotFoundError,
    UnauthenticatedError,
    VaultError,
)
from common.logging_config import get_logger
from common.types import FileRecord, Invalidation, Listing, MutationResult, Session
from vault.services import ObjectStorageService
from vault.state import AppState

logger = get_logger(__name__)


class FileRepository:
    """Lists and deletes the current session's files, keeping service order."""

    def __init__(self, state: AppState, storage: ObjectStorageService, bucket_id: str):
        self.state = state
        self.storage = storage
        self.bucket_id = bucket_id

    @property
    def records(self) -> Tuple[FileRecord, ...]:
        return self.state.listing.records

    @property
    def failed(self) -> bool:
        return self.state.listing.failed

    @property
    def error(self) -> Optional[str]:
        return self.state.listing.error

    def get_cached(self, file_id: str) -> Optional[FileRecord]:
        for record in self.records:
            if record.file_id == file_id:
                return record
        return None

    def _require_session(self, operation: str) -> Session:
        if self.state.session is None:
            raise UnauthenticatedError(f"Not logged in. Please log in to {operation}.")
        return self.state.session

    async def list(self) -> Listing:
        """
        Fetch all files visible to the current session.

        A service failure yields an empty listing marked failed instead of
        raising. A result that arrives after the session changed is
        discarded.

        Raises:
            UnauthenticatedError: No active session (checked before any request)
        """
        session = self._require_session("list files")

        try:
            records = await self.storage.list(self.bucket_id)
            listing = Listing(records=tuple(records))
            logger.info(f"Fetched {len(records)} file(s) [bucket={self.bucket_id}]")
        except VaultError as e:
            logger.error(f"Failed to fetch files: {e}")
            listing = Listing(failed=True, error=e.message)

        if self.state.session is not session:
            logger.debug("Session changed while listing, ignoring late result")
            return listing

        self.state.listing = listing
        return listing

    async def remove(self, file_id: str) -> MutationResult:
        """
        Delete one file. The caller must have obtained user confirmation.

        On success the record leaves the cached listing immediately. On
        failure the listing is untouched and the error propagates.

        Raises:
            UnauthenticatedError: No active session
            NotFoundError: The id does not exist in the bucket
            ServiceUnavailableError: Storage backend unreachable
        """
        session = self._require_session("delete files")

        try:
            await self.storage.delete(self.bucket_id, file_id)
        except NotFoundError:
            logger.warning(f"Delete target not found: {file_id}")
            raise
        except VaultError as e:
            logger.error(f"Delete failed for {file_id}: {e}")
            raise

        logger.info(f"Deleted file {file_id}")
        if self.state.session is session:
            current = self.state.listing
            self.state.listing = Listing(
                records=tuple(r for r in current.records if r.file_id != file_id),
                failed=current.failed,
                error=current.error,
            )
        return MutationResult(file_id=file_id, invalidation=Invalidation.PATCHED)
