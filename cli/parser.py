"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
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


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0].lower()
    parser = _PARSERS.get(command_name)
    if parser is None:
        raise ParseError(f"Unknown command: {tokens[0]}")
    return parser(tokens[1:])


def _parse_register(args: list[str]) -> RegisterCommand:
    """Parse 'register <name> <email> <password>' command."""
    if len(args) != 3:
        raise ParseError("register requires exactly 3 arguments: <name> <email> <password>")

    name, email, password = args
    return RegisterCommand(name=name, email=email, password=password)


def _parse_login(args: list[str]) -> LoginCommand:
    """Parse 'login <email> <password>' command."""
    if len(args) != 2:
        raise ParseError("login requires exactly 2 arguments: <email> <password>")

    email, password = args
    return LoginCommand(email=email, password=password)


def _no_arguments(name: str, command_type):
    def parse(args: list[str]):
        if args:
            raise ParseError(f"{name} takes no arguments")
        return command_type()
    return parse


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path>' command. One file per upload."""
    if len(args) != 1:
        raise ParseError("upload requires exactly 1 argument: <path> (one file at a time)")
    return UploadCommand(path=args[0])


def _single_id(name: str, command_type):
    def parse(args: list[str]):
        if len(args) != 1:
            raise ParseError(f"{name} requires exactly 1 argument: <file_id>")
        return command_type(args[0])
    return parse


def _parse_open(args: list[str]) -> OpenCommand:
    if len(args) != 1:
        raise ParseError("open requires exactly 1 argument: <share_link|file_id>")
    return OpenCommand(target=args[0])


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <share_link|file_id> [output_path]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("download requires 1 or 2 arguments: <share_link|file_id> [output_path]")

    target = args[0]
    output_path = args[1] if len(args) > 1 else None
    return DownloadCommand(target=target, output_path=output_path)


_PARSERS = {
    "register": _parse_register,
    "login": _parse_login,
    "logout": _no_arguments("logout", LogoutCommand),
    "whoami": _no_arguments("whoami", WhoamiCommand),
    "list": _no_arguments("list", ListCommand),
    "upload": _parse_upload,
    "delete": _single_id("delete", DeleteCommand),
    "share": _single_id("share", ShareCommand),
    "open": _parse_open,
    "download": _parse_download,
}
