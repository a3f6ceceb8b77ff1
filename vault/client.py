"""Wires the vault components around one application state."""

from typing import Optional, Tuple

from common.constants import PREVIEW_HEIGHT, PREVIEW_WIDTH
from common.logging_config import get_logger
from vault.file_repository import FileRepository
from vault.services import IdentityService, ObjectStorageService
from vault.session_manager import SessionManager
from vault.share_resolver import ShareResolver
from vault.state import AppState
from vault.upload_pipeline import UploadPipeline

logger = get_logger(__name__)


class VaultClient:
    """
    One client process worth of components.

    The session manager, repository and pipeline share a single AppState;
    the share resolver does not touch it.
    """

    def __init__(
        self,
        identity: IdentityService,
        storage: ObjectStorageService,
        bucket_id: str,
        share_origin: str,
        state: Optional[AppState] = None,
        preview_size: Tuple[int, int] = (PREVIEW_WIDTH, PREVIEW_HEIGHT),
    ):
        self.state = state or AppState()
        self.identity = identity
        self.storage = storage
        self.sessions = SessionManager(self.state, identity)
        self.files = FileRepository(self.state, storage, bucket_id)
        self.uploads = UploadPipeline(self.state, storage, self.files, bucket_id)
        self.shares = ShareResolver(storage, bucket_id, share_origin, preview_size)
        logger.debug(f"Vault client ready [bucket={bucket_id}, origin={share_origin}]")
