"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class RegisterCommand:
    """Register a new user account."""

    username: str
    password: str
    command: Literal["register"] = "register"


@dataclass(frozen=True)
class LoginCommand:
    """Login with username and password."""

    username: str
    password: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class LogoutCommand:
    command: Literal["logout"] = "logout"


@dataclass(frozen=True)
class UploadCommand:
    """Upload a local file, optionally with a preview image."""

    path: str
    thumbnail_path: str | None = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ListCommand:
    command: Literal["list"] = "list"


@dataclass(frozen=True)
class InfoCommand:
    """Show the manifest of one transfer."""

    transfer_id: str
    command: Literal["info"] = "info"


@dataclass(frozen=True)
class DownloadCommand:
    """Download a transfer by id."""

    transfer_id: str
    output_path: str | None = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a transfer by id."""

    transfer_id: str
    command: Literal["delete"] = "delete"


CommandRequest = (
    RegisterCommand
    | LoginCommand
    | LogoutCommand
    | UploadCommand
    | ListCommand
    | InfoCommand
    | DownloadCommand
    | DeleteCommand
)
