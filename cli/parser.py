"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    DeleteCommand,
    DownloadCommand,
    InfoCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    RegisterCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL or the joined command line

    Returns:
        One of the command dataclasses in cli.models

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

    command_name, args = tokens[0], tokens[1:]

    if command_name == "register":
        return _parse_credentials(args, "register", RegisterCommand)
    elif command_name == "login":
        return _parse_credentials(args, "login", LoginCommand)
    elif command_name == "logout":
        _expect_no_args(args, "logout")
        return LogoutCommand()
    elif command_name == "upload":
        return _parse_upload(args)
    elif command_name == "list":
        _expect_no_args(args, "list")
        return ListCommand()
    elif command_name == "info":
        return InfoCommand(transfer_id=_single_id(args, "info"))
    elif command_name == "download":
        return _parse_download(args)
    elif command_name == "delete":
        return DeleteCommand(transfer_id=_single_id(args, "delete"))
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_credentials(args: list[str], name: str, command_type):
    """Parse '<name> <username> <password>'."""
    if len(args) != 2:
        raise ParseError(f"{name} requires exactly 2 arguments: <username> <password>")

    username, password = args
    return command_type(username=username, password=password)


def _expect_no_args(args: list[str], name: str) -> None:
    if args:
        raise ParseError(f"{name} takes no arguments")


def _single_id(args: list[str], name: str) -> str:
    if len(args) != 1:
        raise ParseError(f"{name} requires exactly 1 argument: <transfer_id>")
    return args[0]


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path> [--thumbnail <image>]' command."""
    thumbnail_path = None
    if "--thumbnail" in args:
        flag_index = args.index("--thumbnail")
        if flag_index + 1 >= len(args):
            raise ParseError("--thumbnail requires an image path")
        thumbnail_path = args[flag_index + 1]
        args = args[:flag_index] + args[flag_index + 2:]

    if len(args) != 1:
        raise ParseError("upload requires exactly 1 file path")

    return UploadCommand(path=args[0], thumbnail_path=thumbnail_path)


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <transfer_id> [output_path]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("download requires 1 or 2 arguments: <transfer_id> [output_path]")

    transfer_id = args[0]
    output_path = args[1] if len(args) > 1 else None

    return DownloadCommand(transfer_id=transfer_id, output_path=output_path)
