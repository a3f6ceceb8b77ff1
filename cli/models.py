"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class RegisterCommand:
    """Create an account and log in."""

    name: str
    email: str
    password: str
    command: Literal["register"] = "register"


@dataclass(frozen=True)
class LoginCommand:
    """Login with email and password."""

    email: str
    password: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class LogoutCommand:
    command: Literal["logout"] = "logout"


@dataclass(frozen=True)
class WhoamiCommand:
    command: Literal["whoami"] = "whoami"


@dataclass(frozen=True)
class ListCommand:
    """List the current user's files."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class UploadCommand:
    """Upload one local file."""

    path: str
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete one file by id."""

    file_id: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class ShareCommand:
    """Print the share link of a file."""

    file_id: str
    command: Literal["share"] = "share"


@dataclass(frozen=True)
class OpenCommand:
    """Resolve a share link or file id anonymously."""

    target: str
    command: Literal["open"] = "open"


@dataclass(frozen=True)
class DownloadCommand:
    """Download a shared file."""

    target: str
    output_path: str | None = None
    command: Literal["download"] = "download"


CommandRequest = (
    RegisterCommand
    | LoginCommand
    | LogoutCommand
    | WhoamiCommand
    | ListCommand
    | UploadCommand
    | DeleteCommand
    | ShareCommand
    | OpenCommand
    | DownloadCommand
)
