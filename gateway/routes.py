"""Public share routes. No authentication: a share is anyone-with-the-link."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from common.exceptions import ShareUnavailableError
from common.logging_config import get_logger
from gateway import config
from gateway.schemas import ErrorResponse, SharedFileResponse
from vault.backends import AppwriteStorage, AppwriteTransport
from vault.share_resolver import ShareResolver

logger = get_logger(__name__)

router = APIRouter(prefix="/share", tags=["Shares"])

_transport: Optional[AppwriteTransport] = None
_resolver: Optional[ShareResolver] = None


def get_resolver() -> ShareResolver:
    """
    Get or create the process-wide ShareResolver.

    Returns:
        ShareResolver over an anonymous Appwrite storage client
    """
    global _transport, _resolver
    if _resolver is None:
        logger.debug("Creating ShareResolver")
        _transport = AppwriteTransport(
            endpoint=config.APPWRITE_ENDPOINT,
            project_id=config.APPWRITE_PROJECT_ID,
            timeout=config.REQUEST_TIMEOUT,
        )
        _resolver = ShareResolver(
            AppwriteStorage(_transport),
            bucket_id=config.BUCKET_ID,
            origin=config.PUBLIC_ORIGIN,
        )
    return _resolver


async def close_resolver() -> None:
    global _transport, _resolver
    if _transport is not None:
        await _transport.aclose()
    _transport = None
    _resolver = None


ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "File not found or no longer available"},
    502: {"model": ErrorResponse, "description": "Storage service could not complete the request"},
    503: {"model": ErrorResponse, "description": "Storage service unavailable"},
}


@router.get("/{file_id}", response_model=SharedFileResponse, responses=ERROR_RESPONSES)
async def get_shared_file(file_id: str, resolver: ShareResolver = Depends(get_resolver)):
    """
    Resolve a share link to file metadata plus download and preview URLs.

    Returns:
        - name, mime_type, size, created_at of the shared file
        - download_url: direct download link
        - preview_url: inline preview link, only for images

    Raises:
        - 404: Missing, deleted or not shared (cause not disclosed)
        - 503: Storage service unavailable
    """
    shared = await resolver.resolve(file_id)
    return SharedFileResponse.from_shared(shared, resolver.share_url(file_id))


@router.get("/{file_id}/download", status_code=status.HTTP_307_TEMPORARY_REDIRECT, responses=ERROR_RESPONSES)
async def download_shared_file(file_id: str, resolver: ShareResolver = Depends(get_resolver)):
    """Redirect to the storage download URL of a shared file."""
    shared = await resolver.resolve(file_id)
    return RedirectResponse(shared.download_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/{file_id}/preview", status_code=status.HTTP_307_TEMPORARY_REDIRECT, responses=ERROR_RESPONSES)
async def preview_shared_file(file_id: str, resolver: ShareResolver = Depends(get_resolver)):
    """Redirect to the image preview of a shared file. Non-images have no preview."""
    shared = await resolver.resolve(file_id)
    if shared.preview_url is None:
        raise ShareUnavailableError("No preview available for this file.")
    return RedirectResponse(shared.preview_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
