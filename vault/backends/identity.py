"""Identity service backed by the Appwrite Account API."""

from common.constants import SESSION_REF_CURRENT
from common.logging_config import get_logger
from common.types import Session
from vault.backends.transport import AppwriteTransport, json_body, require

logger = get_logger(__name__)


class AppwriteIdentity:
    """Account endpoints: sessions and identity creation."""

    def __init__(self, transport: AppwriteTransport):
        self.transport = transport

    async def _session_from_account(self, session_id: str) -> Session:
        response = await self.transport.request("GET", "/account")
        account = json_body(response)
        return Session(
            session_id=session_id,
            user_id=require(account, "$id"),
            name=account.get("name", ""),
            email=account.get("email", ""),
        )

    async def get_current_session(self) -> Session:
        response = await self.transport.request("GET", f"/account/sessions/{SESSION_REF_CURRENT}")
        return await self._session_from_account(require(json_body(response), "$id"))

    async def create_session(self, email: str, password: str) -> Session:
        response = await self.transport.request(
            "POST",
            "/account/sessions/email",
            json={"email": email, "password": password},
        )
        session_id = require(json_body(response), "$id")
        logger.debug(f"Session created [session_id={session_id}]")
        return await self._session_from_account(session_id)

    async def create_identity(self, user_id: str, email: str, password: str, name: str) -> str:
        response = await self.transport.request(
            "POST",
            "/account",
            json={"userId": user_id, "email": email, "password": password, "name": name},
        )
        return require(json_body(response), "$id")

    async def destroy_session(self, session_ref: str = SESSION_REF_CURRENT) -> None:
        try:
            await self.transport.request("DELETE", f"/account/sessions/{session_ref}")
        finally:
            if session_ref == SESSION_REF_CURRENT:
                self.transport.forget_session()
