"""Moves one selected local file into object storage."""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional, Union

from common.exceptions import LocalFileError, UnauthenticatedError, VaultError
from common.ids import unique_id
from common.logging_config import get_logger
from common.types import FileRecord, Invalidation, Listing, LocalFile, TransferSnapshot
from vault.file_repository import FileRepository
from vault.services import ObjectStorageService
from vault.state import AppState

logger = get_logger(__name__)

_FINISHED = object()

LocalFileLike = Union[LocalFile, Path, str]


@dataclass(frozen=True)
class UploadResult:
    file_id: str
    record: FileRecord
    invalidation: Invalidation
    listing: Optional[Listing] = None


class UploadTask:
    """
    One in-flight upload.

    Progress is exposed through snapshots(), a finite stream that can be
    consumed once. percent never decreases while the task runs, ends at 100
    on success and is reset to 0 on failure.
    """

    def __init__(self, source: LocalFile):
        self.source = source
        self.file_id: Optional[str] = None
        self.snapshot: Optional[TransferSnapshot] = None
        self.percent = 0
        self.error: Optional[BaseException] = None
        self._queue: asyncio.Queue = asyncio.Queue()
        self._consumed = False
        self._runner: Optional[asyncio.Task] = None

    @property
    def done(self) -> bool:
        return self._runner is not None and self._runner.done()

    def report(self, snapshot: TransferSnapshot) -> None:
        """Record a progress snapshot from the storage backend."""
        if self.done or snapshot.percent < self.percent:
            return
        self.snapshot = snapshot
        self.percent = snapshot.percent
        self._queue.put_nowait(snapshot)

    def _complete(self) -> None:
        if self.percent < 100:
            total = self.snapshot.total if self.snapshot and self.snapshot.total > 0 else 1
            self.report(TransferSnapshot(transferred=total, total=total))
        self._queue.put_nowait(_FINISHED)

    def _fail(self, error: BaseException) -> None:
        self.error = error
        self.percent = 0
        self.snapshot = None
        self._queue.put_nowait(_FINISHED)

    async def snapshots(self) -> AsyncIterator[TransferSnapshot]:
        if self._consumed:
            raise RuntimeError("Upload progress can only be consumed once")
        self._consumed = True
        while True:
            item = await self._queue.get()
            if item is _FINISHED:
                return
            yield item

    async def wait(self) -> UploadResult:
        """
        Wait for the task to reach a terminal state.

        Raises:
            VaultError: The upload failed; the message is the service's
        """
        return await self._runner


class UploadPipeline:
    """Runs at most one upload at a time and refreshes the repository after it."""

    def __init__(
        self,
        state: AppState,
        storage: ObjectStorageService,
        repository: FileRepository,
        bucket_id: str,
    ):
        self.state = state
        self.storage = storage
        self.repository = repository
        self.bucket_id = bucket_id
        self._active: Optional[UploadTask] = None

    @property
    def active(self) -> Optional[UploadTask]:
        return self._active

    def start(self, local_file: Optional[LocalFileLike]) -> Optional[UploadTask]:
        """
        Begin uploading a local file. Must be called from a running event loop.

        Returns:
            The new UploadTask, or None when no file was given or another
            upload is still in flight

        Raises:
            UnauthenticatedError: No active session (checked before any request)
            LocalFileError: The path does not name a readable file
        """
        if local_file is None:
            return None
        if self.state.session is None:
            raise UnauthenticatedError("Not logged in. Please log in to upload files.")
        if self._active is not None:
            logger.warning(f"Upload of {self._active.source.name} in progress, ignoring new upload request")
            return None

        source = self._load_source(local_file)
        task = UploadTask(source)
        self._active = task
        task._runner = asyncio.get_running_loop().create_task(self._run(task))
        return task

    async def upload(self, local_file: Optional[LocalFileLike]) -> Optional[UploadResult]:
        task = self.start(local_file)
        if task is None:
            return None
        return await task.wait()

    def _load_source(self, local_file: LocalFileLike) -> LocalFile:
        if isinstance(local_file, LocalFile):
            return local_file
        try:
            return LocalFile.from_path(local_file)
        except OSError as e:
            raise LocalFileError(str(e)) from e

    async def _run(self, task: UploadTask) -> UploadResult:
        task.file_id = unique_id()
        logger.info(
            f"Uploading {task.source.name} ({task.source.size} bytes, {task.source.mime_type}) "
            f"[file_id={task.file_id}]"
        )
        try:
            record = await self._store(task)
            task._complete()
            logger.info(f"Upload complete: {record.name} [file_id={record.file_id}]")
            listing = await self._refresh()
        except VaultError as e:
            logger.error(f"Upload failed for {task.source.name}: {e}")
            task._fail(e)
            raise
        except BaseException as e:
            # Cancellation or a bug: the snapshot stream must still end
            logger.error(f"Upload aborted for {task.source.name}: {e!r}", exc_info=True)
            task._fail(e)
            raise
        finally:
            self._active = None

        invalidation = Invalidation.REFRESHED
        if listing is None or listing.failed:
            invalidation = Invalidation.STALE
        return UploadResult(
            file_id=record.file_id,
            record=record,
            invalidation=invalidation,
            listing=listing,
        )

    async def _store(self, task: UploadTask) -> FileRecord:
        try:
            return await self.storage.create(self.bucket_id, task.file_id, task.source, task.report)
        except OSError as e:
            raise LocalFileError(f"Cannot read {task.source.path}: {e}") from e

    async def _refresh(self) -> Optional[Listing]:
        try:
            return await self.repository.list()
        except UnauthenticatedError:
            logger.info("Session ended during upload, skipping listing refresh")
            return None
