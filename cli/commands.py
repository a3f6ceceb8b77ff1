"""Command handler functions for CLI operations."""

import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, TextIO

import httpx

from cli.models import (
    DeleteCommand,
    DownloadCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    OpenCommand,
    RegisterCommand,
    ShareCommand,
    UploadCommand,
    WhoamiCommand,
)
from cli.constants import DELETE_CONFIRMATION
from cli.utils import format_date, format_file_size, format_progress, format_record
from common.exceptions import (
    InvalidCredentialsError,
    RegistrationIncompleteError,
    ServiceUnavailableError,
    ShareUnavailableError,
    UnauthenticatedError,
    VaultError,
)
from common.logging_config import get_logger
from common.types import TransferSnapshot
from vault.backends.transport import error_from_response
from vault.client import VaultClient
from vault.share_resolver import ShareResolver

logger = get_logger(__name__)

NOT_LOGGED_IN = "Error: Not logged in. Please run: login <email> <password>"

Confirm = Callable[[str], Awaitable[bool]]


async def handle_register(cmd: RegisterCommand, client: VaultClient) -> str:
    """
    Handle 'register' command.

    Args:
        cmd: RegisterCommand with name, email and password
        client: VaultClient the session belongs to

    Returns:
        Success or error message
    """
    try:
        session = await client.sessions.register(cmd.name, cmd.email, cmd.password)
    except RegistrationIncompleteError as e:
        return f"{e.message}\nYour account exists. Please run: login {cmd.email} <password>"
    except VaultError as e:
        return f"Registration failed: {e.message}"
    return f"Registration successful!\nLogged in as {session.name} <{session.email}>"


async def handle_login(cmd: LoginCommand, client: VaultClient) -> str:
    """
    Handle 'login' command.

    Args:
        cmd: LoginCommand with email and password
        client: VaultClient the session belongs to

    Returns:
        Success or error message
    """
    try:
        session = await client.sessions.login(cmd.email, cmd.password)
    except InvalidCredentialsError as e:
        return f"Login failed: {e.message}"
    except ServiceUnavailableError as e:
        return f"Login failed: {e.message} Please try again."
    except VaultError as e:
        return f"Login failed: {e.message}"
    return f"Login successful!\nWelcome, {session.name or session.email}"


async def handle_logout(cmd: LogoutCommand, client: VaultClient) -> str:
    if not client.state.is_authenticated:
        return "Not logged in."
    result = await client.sessions.logout()
    if result.revoked:
        return "Logged out."
    return f"Logged out locally, but the server session could not be revoked: {result.error}"


async def handle_whoami(cmd: WhoamiCommand, client: VaultClient) -> str:
    session = client.state.session
    if session is None:
        return "Not logged in."
    return f"{session.name} <{session.email}> (user ID: {session.user_id})"


async def handle_list(cmd: ListCommand, client: VaultClient) -> str:
    """
    Handle 'list' command.

    Returns:
        Formatted list of files, or a retry hint if the fetch failed
    """
    try:
        listing = await client.files.list()
    except UnauthenticatedError:
        return NOT_LOGGED_IN

    if listing.failed:
        return f"Error: Could not load your files: {listing.error}\nRun 'list' to retry."
    if not listing.records:
        return "No files yet. Upload one with: upload <path>"

    output = [f"Found {len(listing.records)} file(s):\n"]
    output.extend(format_record(record) for record in listing.records)
    return '\n'.join(output)


async def handle_upload(cmd: UploadCommand, client: VaultClient, out: TextIO = sys.stdout) -> str:
    """
    Handle 'upload' command, rendering progress from the task's snapshots.

    Args:
        cmd: UploadCommand with the local path
        client: VaultClient the upload runs on
        out: Stream progress lines are written to

    Returns:
        Success or error message
    """
    logger.info(f"Executing upload command: path={cmd.path}")
    try:
        task = client.uploads.start(cmd.path)
    except UnauthenticatedError:
        return NOT_LOGGED_IN
    except VaultError as e:
        return f"Upload failed: {e.message}"

    if task is None:
        return "Another upload is still in progress. Wait for it to finish."

    label = f"Uploading {task.source.name}"
    async for snapshot in task.snapshots():
        out.write(format_progress(label, snapshot))
        out.flush()

    try:
        result = await task.wait()
    except VaultError as e:
        out.write('\r' + ' ' * 80 + '\r')
        out.flush()
        return f"Upload failed: {e.message}"

    out.write('\n')
    out.flush()
    lines = [f"Uploaded: {result.record.name} (ID: {result.file_id}, Size: {format_file_size(result.record.size)})"]
    if result.listing is not None and result.listing.failed:
        lines.append(f"Could not refresh your files: {result.listing.error}. Run 'list' to retry.")
    return '\n'.join(lines)


async def handle_delete(cmd: DeleteCommand, client: VaultClient, confirm: Confirm) -> str:
    """
    Handle 'delete' command. Asks for confirmation before deleting.

    Args:
        cmd: DeleteCommand with the file id
        client: VaultClient the file belongs to
        confirm: Coroutine asking the user a yes/no question

    Returns:
        Success, cancellation or error message
    """
    if not client.state.is_authenticated:
        return NOT_LOGGED_IN

    record = client.files.get_cached(cmd.file_id)
    label = record.name if record else cmd.file_id
    if not await confirm(DELETE_CONFIRMATION.format(label=label)):
        return "Delete cancelled."

    try:
        await client.files.remove(cmd.file_id)
    except VaultError as e:
        return f"Delete failed: {e.message}"
    return f"Deleted: {label}"


async def handle_share(cmd: ShareCommand, client: VaultClient) -> str:
    return client.shares.share_url(cmd.file_id)


def _target_id(target: str) -> str:
    if "/" in target:
        return ShareResolver.extract_id(target)
    return target


async def handle_open(cmd: OpenCommand, client: VaultClient) -> str:
    """
    Handle 'open' command: show a shared file as an anonymous visitor would.

    Returns:
        File details with download/preview links, or the unavailable message
    """
    try:
        shared = await client.shares.resolve(_target_id(cmd.target))
    except ValueError as e:
        return f"Error: {e}"
    except ShareUnavailableError as e:
        return e.message
    except VaultError as e:
        return f"Error: {e.message}"

    record = shared.record
    lines = [
        f"Shared file: {record.name}",
        f"  {format_file_size(record.size)} · Uploaded {format_date(record.created_at)}",
        f"  Download: {shared.download_url}",
    ]
    if shared.preview_url:
        lines.append(f"  Preview:  {shared.preview_url}")
    return '\n'.join(lines)


def _output_file(output_path: Optional[str], filename: str) -> Path:
    if not output_path:
        return Path.cwd() / filename
    output_file = Path(output_path).expanduser()
    if output_file.is_dir():
        output_file = output_file / filename
    output_file.parent.mkdir(parents=True, exist_ok=True)
    return output_file


async def handle_download(
    cmd: DownloadCommand,
    client: VaultClient,
    out: TextIO = sys.stdout,
    http: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Handle 'download' command through the public download URL.

    Args:
        cmd: DownloadCommand with share link or id and optional output path
        client: VaultClient used to resolve the share
        out: Stream progress lines are written to
        http: HTTP client for the download (a fresh one when None)

    Returns:
        Success or error message with the saved path
    """
    try:
        shared = await client.shares.resolve(_target_id(cmd.target))
    except ValueError as e:
        return f"Error: {e}"
    except ShareUnavailableError as e:
        return e.message
    except VaultError as e:
        return f"Error: {e.message}"

    record = shared.record
    output_file = _output_file(cmd.output_path, record.name)
    logger.info(f"Downloading {record.file_id} to {output_file}")

    own_client = http is None
    http = http or httpx.AsyncClient(timeout=httpx.Timeout(30.0, read=None))
    downloaded = 0
    try:
        async with http.stream('GET', shared.download_url) as response:
            if response.status_code >= 400:
                await response.aread()
                return f"Error: {error_from_response(response).message}"

            total = int(response.headers.get('Content-Length', 0)) or record.size
            with open(output_file, 'wb') as f:
                async for chunk in response.aiter_bytes(chunk_size=8192):
                    f.write(chunk)
                    downloaded += len(chunk)
                    out.write(format_progress(
                        f"Downloading {record.name}",
                        TransferSnapshot(transferred=min(downloaded, total), total=total),
                    ))
                    out.flush()
        out.write('\n')
        out.flush()
    except httpx.TransportError as e:
        return f"Error: Download failed: {e}"
    except IOError as e:
        return f"Error writing file: {e}"
    finally:
        if own_client:
            await http.aclose()

    return f"Downloaded: {record.name} ({format_file_size(downloaded)})\nSaved to: {output_file.absolute()}"
