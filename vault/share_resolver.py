"""Public share links: construction, parsing and anonymous resolution."""

from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import quote, unquote, urlsplit

from common.constants import PREVIEW_HEIGHT, PREVIEW_WIDTH, SHARE_PATH_PREFIX
from common.exceptions import NotFoundError, ShareUnavailableError, UnauthenticatedError
from common.logging_config import get_logger
from common.types import FileRecord
from vault.services import ObjectStorageService

logger = get_logger(__name__)


@dataclass(frozen=True)
class SharedFile:
    """A resolved share: metadata plus the URLs a visitor needs."""
    record: FileRecord
    download_url: str
    preview_url: Optional[str] = None


class ShareResolver:
    """
    Maps file ids to ``<origin>/share/<id>`` links and back.

    Works without a session: nothing here reads application state.
    """

    def __init__(
        self,
        storage: ObjectStorageService,
        bucket_id: str,
        origin: str,
        preview_size: Tuple[int, int] = (PREVIEW_WIDTH, PREVIEW_HEIGHT),
    ):
        self.storage = storage
        self.bucket_id = bucket_id
        self.origin = origin.rstrip("/")
        self.preview_size = preview_size

    def share_url(self, file_id: str) -> str:
        return f"{self.origin}{SHARE_PATH_PREFIX}{quote(file_id, safe='')}"

    @staticmethod
    def extract_id(link: str) -> str:
        """
        Extract the file id from a share URL or a bare ``/share/<id>`` path.

        Raises:
            ValueError: If the link is not a share link
        """
        path = urlsplit(link.strip()).path.rstrip("/")
        prefix = SHARE_PATH_PREFIX.rstrip("/")
        head, _, file_id = path.rpartition("/")
        if not head.endswith(prefix) or not file_id:
            raise ValueError(f"Not a share link: {link}")
        return unquote(file_id)

    def download_url(self, file_id: str) -> str:
        return self.storage.download_url(self.bucket_id, file_id)

    def preview_url(self, file_id: str, width: int = PREVIEW_WIDTH, height: int = PREVIEW_HEIGHT) -> str:
        return self.storage.preview_url(self.bucket_id, file_id, width, height)

    async def resolve(self, file_id: str) -> SharedFile:
        """
        Fetch the metadata behind a share link.

        Raises:
            ShareUnavailableError: Missing, deleted or not readable; the cause
                is not disclosed
            ServiceUnavailableError: Storage backend unreachable
        """
        try:
            record = await self.storage.get(self.bucket_id, file_id)
        except (NotFoundError, UnauthenticatedError) as e:
            logger.info(f"Share unavailable [file_id={file_id}]: {e}")
            raise ShareUnavailableError() from e

        preview = self.preview_url(record.file_id, *self.preview_size) if record.is_image else None
        return SharedFile(
            record=record,
            download_url=self.download_url(record.file_id),
            preview_url=preview,
        )
