"""REPL with prompt_toolkit for user interaction."""

import os
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from cli.commands import (
    Confirm,
    handle_delete,
    handle_download,
    handle_list,
    handle_login,
    handle_logout,
    handle_open,
    handle_register,
    handle_share,
    handle_upload,
    handle_whoami,
)
from cli.completer import FileVaultCompleter
from cli.config import Config
from cli.constants import (
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
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
from cli.parser import ParseError, parse_command
from common.exceptions import ServiceUnavailableError
from common.logging_config import get_logger
from vault.backends import AppwriteIdentity, AppwriteStorage, AppwriteTransport
from vault.client import VaultClient

logger = get_logger(__name__)


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def build_client(config: Config) -> tuple[VaultClient, AppwriteTransport]:
    """
    Create the vault client for the configured Appwrite project.

    Returns:
        The client and its transport (the caller closes the transport)
    """
    transport = AppwriteTransport(
        endpoint=config.get_endpoint(),
        project_id=config.get_project_id(),
        timeout=config.get_timeout(),
        fallback_cookies=config.get_session_cookies(),
        on_cookies_changed=config.set_session_cookies,
    )
    storage = AppwriteStorage(transport)
    client = VaultClient(
        identity=AppwriteIdentity(transport),
        storage=storage,
        bucket_id=config.get_bucket_id(),
        share_origin=config.get_share_origin(),
        preview_size=config.get_preview_size(),
    )
    return client, transport


async def dispatch_command(cmd_obj, client: VaultClient, confirm: Confirm) -> str:
    """Dispatch parsed command to appropriate handler."""
    if isinstance(cmd_obj, RegisterCommand):
        return await handle_register(cmd_obj, client)
    elif isinstance(cmd_obj, LoginCommand):
        return await handle_login(cmd_obj, client)
    elif isinstance(cmd_obj, LogoutCommand):
        return await handle_logout(cmd_obj, client)
    elif isinstance(cmd_obj, WhoamiCommand):
        return await handle_whoami(cmd_obj, client)
    elif isinstance(cmd_obj, ListCommand):
        return await handle_list(cmd_obj, client)
    elif isinstance(cmd_obj, UploadCommand):
        return await handle_upload(cmd_obj, client)
    elif isinstance(cmd_obj, DeleteCommand):
        return await handle_delete(cmd_obj, client, confirm)
    elif isinstance(cmd_obj, ShareCommand):
        return await handle_share(cmd_obj, client)
    elif isinstance(cmd_obj, OpenCommand):
        return await handle_open(cmd_obj, client)
    elif isinstance(cmd_obj, DownloadCommand):
        return await handle_download(cmd_obj, client)
    else:
        return f"Unknown command type: {type(cmd_obj)}"


async def restore_session(client: VaultClient) -> str:
    try:
        session = await client.sessions.probe()
    except ServiceUnavailableError as e:
        return f"Could not reach the identity service ({e.message}). You are logged out."
    if session is None:
        return "Not logged in. Run: login <email> <password> or register <name> <email> <password>"
    return f"Logged in as {session.name} <{session.email}>"


async def repl_loop(config: Config) -> None:
    """Start interactive REPL with prompt_toolkit."""
    missing = config.missing_settings()
    if missing:
        print(f"Missing settings in {config.config_path}: {', '.join(missing)}")
        return

    client, transport = build_client(config)
    session: PromptSession = PromptSession(
        completer=FileVaultCompleter(client.state),
        history=InMemoryHistory(),
        style=STYLE,
    )

    async def confirm(question: str) -> bool:
        answer = await session.prompt_async(question)
        return answer.strip().lower() in ("y", "yes")

    clear_screen()
    show_welcome()
    print(await restore_session(client))

    try:
        while True:
            try:
                user_input = await session.prompt_async([("class:prompt", PROMPT_TEXT)])

                if not user_input.strip():
                    continue

                if user_input.strip() == "exit":
                    print("Goodbye!")
                    break

                if user_input.strip() == "help":
                    print(HELP_TEXT)
                    continue

                if user_input.strip() == "clear":
                    clear_screen()
                    show_welcome()
                    continue

                cmd_obj = parse_command(user_input)
                result = await dispatch_command(cmd_obj, client, confirm)
                print(result)

            except ParseError as e:
                print(f"Error: {e}")
            except KeyboardInterrupt:
                continue
            except EOFError:
                print("\nGoodbye!")
                break
    finally:
        await transport.aclose()
