"""Exception taxonomy shared by the vault core, its backends and front ends."""

from typing import Optional


class VaultError(Exception):
    """
    Base exception class for all FileVault errors.

    Carries the message text reported by the external service so callers
    can show it to the user verbatim.
    """

    def __init__(self, message: str, code: Optional[int] = None, error_type: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.error_type = error_type


class UnauthenticatedError(VaultError):
    """
    Raised when an operation needs a session and none is active.
    """
    pass


class InvalidCredentialsError(VaultError):
    """
    Raised when email/password do not match an identity.
    """
    pass


class AlreadyExistsError(VaultError):
    """
    Raised when registering an email that already has an identity.
    """
    pass


class ServiceUnavailableError(VaultError):
    """
    Raised when the identity or storage backend is unreachable or failing.
    """
    pass


class NotFoundError(VaultError):
    """
    Raised when a file id does not exist in the bucket.
    """
    pass


class ShareUnavailableError(NotFoundError):
    """
    Raised when a share link cannot be resolved for an anonymous visitor.

    Deleted, never existed and permission denied all map here.
    """

    DEFAULT_MESSAGE = "File not found or no longer available."

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)


class RejectedError(VaultError):
    """
    Raised when the storage backend rejects an upload (size, type, quota).
    """
    pass


class RegistrationIncompleteError(VaultError):
    """
    Raised when the identity was created but the follow-up login failed.

    The account exists; the caller is not logged in.
    """

    def __init__(self, message: str, user_id: str):
        super().__init__(message)
        self.user_id = user_id


class OperationInProgressError(VaultError):
    """
    Raised when a session transition starts while another is suspended.
    """
    pass


class LocalFileError(VaultError):
    """
    Raised when the selected local file cannot be read.
    """
    pass
