"""Object storage backed by the Appwrite Storage API."""

import math
from datetime import datetime
from typing import List
from urllib.parse import quote, urlencode

from common.constants import CHUNK_SIZE_BYTES, DEFAULT_MIME_TYPE
from common.exceptions import ServiceUnavailableError
from common.logging_config import get_logger
from common.types import FileRecord, LocalFile, TransferSnapshot
from vault.backends.transport import AppwriteTransport, json_body, require
from vault.services import ProgressCallback

logger = get_logger(__name__)


def parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def record_from_json(data: dict) -> FileRecord:
    """
    Build a FileRecord from an Appwrite file document.

    Raises:
        ServiceUnavailableError: The document is missing fields or malformed
    """
    try:
        return FileRecord(
            file_id=require(data, "$id"),
            name=require(data, "name"),
            mime_type=data.get("mimeType") or DEFAULT_MIME_TYPE,
            size=int(data.get("sizeOriginal", 0)),
            created_at=parse_timestamp(require(data, "$createdAt")),
            bucket_id=data.get("bucketId", ""),
        )
    except (TypeError, ValueError) as e:
        raise ServiceUnavailableError(f"Unexpected response from server: malformed file document ({e})") from e


class AppwriteStorage:
    """Bucket file endpoints plus download/preview URL construction."""

    def __init__(self, transport: AppwriteTransport, chunk_size: int = CHUNK_SIZE_BYTES):
        self.transport = transport
        self.chunk_size = chunk_size

    @staticmethod
    def _files_path(bucket_id: str) -> str:
        return f"/storage/buckets/{quote(bucket_id, safe='')}/files"

    def _file_path(self, bucket_id: str, file_id: str) -> str:
        return f"{self._files_path(bucket_id)}/{quote(file_id, safe='')}"

    async def list(self, bucket_id: str) -> List[FileRecord]:
        response = await self.transport.request("GET", self._files_path(bucket_id))
        return [record_from_json(item) for item in json_body(response).get("files", [])]

    async def get(self, bucket_id: str, file_id: str) -> FileRecord:
        response = await self.transport.request("GET", self._file_path(bucket_id, file_id))
        return record_from_json(json_body(response))

    async def delete(self, bucket_id: str, file_id: str) -> None:
        await self.transport.request("DELETE", self._file_path(bucket_id, file_id))

    async def create(
        self,
        bucket_id: str,
        file_id: str,
        source: LocalFile,
        on_progress: ProgressCallback,
    ) -> FileRecord:
        """
        Upload a local file, in chunks when it exceeds the chunk size.

        Chunks after the first carry the id the service assigned in an
        x-appwrite-id header. Progress is reported in chunks.

        Raises:
            OSError: The local file could not be read
            VaultError: The service rejected or failed the upload
        """
        total_chunks = max(1, math.ceil(source.size / self.chunk_size))
        on_progress(TransferSnapshot(transferred=0, total=total_chunks))

        headers = {}
        data = {}
        with open(source.path, "rb") as f:
            for index in range(total_chunks):
                chunk = f.read(self.chunk_size)
                start = index * self.chunk_size
                if total_chunks > 1:
                    headers["Content-Range"] = f"bytes {start}-{start + len(chunk) - 1}/{source.size}"

                response = await self.transport.request(
                    "POST",
                    self._files_path(bucket_id),
                    data={"fileId": file_id},
                    files={"file": (source.name, chunk, source.mime_type)},
                    headers=headers,
                )
                data = json_body(response)
                if index == 0:
                    headers["x-appwrite-id"] = require(data, "$id")

                on_progress(TransferSnapshot(
                    transferred=int(data.get("chunksUploaded", index + 1)),
                    total=int(data.get("chunksTotal", total_chunks)),
                ))
                logger.debug(f"Uploaded chunk {index + 1}/{total_chunks} of {source.name}")

        return record_from_json(data)

    def download_url(self, bucket_id: str, file_id: str) -> str:
        query = urlencode({"project": self.transport.project_id})
        return self.transport.url(f"{self._file_path(bucket_id, file_id)}/download?{query}")

    def preview_url(self, bucket_id: str, file_id: str, width: int, height: int) -> str:
        query = urlencode({"project": self.transport.project_id, "width": width, "height": height})
        return self.transport.url(f"{self._file_path(bucket_id, file_id)}/preview?{query}")
