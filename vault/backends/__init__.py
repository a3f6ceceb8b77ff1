"""Appwrite implementations of the identity and storage contracts."""

from vault.backends.identity import AppwriteIdentity
from vault.backends.storage import AppwriteStorage
from vault.backends.transport import AppwriteTransport, error_from_response

__all__ = [
    "AppwriteIdentity",
    "AppwriteStorage",
    "AppwriteTransport",
    "error_from_response",
]
