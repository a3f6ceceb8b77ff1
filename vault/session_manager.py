"""Session lifecycle: probe, login, register, logout."""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from common.exceptions import (
    OperationInProgressError,
    RegistrationIncompleteError,
    ServiceUnavailableError,
    UnauthenticatedError,
    VaultError,
)
from common.ids import unique_id
from common.logging_config import get_logger
from common.types import LogoutResult, Session
from vault.services import IdentityService
from vault.state import AppState

logger = get_logger(__name__)


class SessionManager:
    """
    Owns the current identity and its transitions.

    UNKNOWN -> AUTHENTICATED | ANONYMOUS on probe, ANONYMOUS -> AUTHENTICATED
    on login/register, AUTHENTICATED -> ANONYMOUS on logout.
    """

    def __init__(self, state: AppState, identity: IdentityService):
        self.state = state
        self.identity = identity
        self._transition = asyncio.Lock()

    @asynccontextmanager
    async def _exclusive(self, name: str):
        if self._transition.locked():
            raise OperationInProgressError(f"Cannot {name}: another session change is in progress")
        async with self._transition:
            yield

    async def probe(self) -> Optional[Session]:
        """
        Check the identity service for an existing session.

        Returns:
            The active Session, or None when not logged in

        Raises:
            ServiceUnavailableError: If the identity service is unreachable
        """
        async with self._exclusive("probe session"):
            try:
                session = await self.identity.get_current_session()
            except UnauthenticatedError:
                logger.debug("Probe found no session")
                self.state.clear_session()
                return None
            except ServiceUnavailableError as e:
                logger.warning(f"Probe failed, identity service unavailable: {e}")
                self.state.clear_session()
                raise

            self.state.authenticate(session)
            logger.info(f"Probe restored session [user_id={session.user_id}]")
            return session

    async def login(self, email: str, password: str) -> Session:
        """
        Exchange credentials for a session.

        Raises:
            InvalidCredentialsError: Wrong email or password
            ServiceUnavailableError: Identity service unreachable
        """
        async with self._exclusive("log in"):
            return await self._login(email, password)

    async def _login(self, email: str, password: str) -> Session:
        logger.info(f"Attempting to login: {email}")
        try:
            session = await self.identity.create_session(email, password)
        except VaultError as e:
            logger.warning(f"Login failed for {email}: {e}")
            self.state.clear_session()
            raise

        self.state.authenticate(session)
        logger.info(f"Login successful [user_id={session.user_id}]")
        return session

    async def register(self, name: str, email: str, password: str) -> Session:
        """
        Create an identity, then log in with the same credentials.

        Raises:
            AlreadyExistsError: The email is taken (nothing was created)
            RegistrationIncompleteError: The identity exists but login failed
        """
        async with self._exclusive("register"):
            logger.info(f"Attempting to register: {email}")
            user_id = await self.identity.create_identity(unique_id(), email, password, name)
            logger.info(f"Identity created [user_id={user_id}]")

            try:
                return await self._login(email, password)
            except VaultError as e:
                raise RegistrationIncompleteError(
                    f"Account created but login failed: {e.message}", user_id=user_id
                ) from e

    async def logout(self) -> LogoutResult:
        """
        Revoke the current session and clear local state.

        Local state is cleared even when the revoke call fails; the failure
        is logged and reported in the result.
        """
        async with self._exclusive("log out"):
            error = None
            try:
                await self.identity.destroy_session()
            except VaultError as e:
                error = e.message
                logger.warning(f"Session revoke failed, clearing local session anyway: {e}")
            finally:
                self.state.clear_session()

            if error is None:
                logger.info("Logged out")
            return LogoutResult(revoked=error is None, error=error)
