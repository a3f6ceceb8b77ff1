"""Application state container injected into every vault component."""

from typing import Optional, Tuple

from common.types import FileRecord, Listing, Session, SessionStatus


class AppState:
    """
    Holds the current session and the cached file listing.

    One instance per client process. Components receive it explicitly
    instead of reading module globals.
    """

    def __init__(self):
        self.session: Optional[Session] = None
        self.status: SessionStatus = SessionStatus.UNKNOWN
        self.listing: Listing = Listing()

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def records(self) -> Tuple[FileRecord, ...]:
        return self.listing.records

    def authenticate(self, session: Session) -> None:
        self.session = session
        self.status = SessionStatus.AUTHENTICATED
        self.listing = Listing()

    def clear_session(self) -> None:
        self.session = None
        self.status = SessionStatus.ANONYMOUS
        self.listing = Listing()
