"""Command handler functions for CLI operations."""

from typing import Optional

from common.logging_config import get_logger
from cli.client import ChatVaultClient
from cli.config import Config
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

logger = get_logger(__name__)


_client: Optional[ChatVaultClient] = None


def get_client() -> ChatVaultClient:
    """
    Get or create global ChatVaultClient instance.
    """
    global _client
    if _client is None:
        logger.debug("Creating new ChatVaultClient instance")
        _client = ChatVaultClient(Config())
    return _client


def handle_register(cmd: RegisterCommand, client: Optional[ChatVaultClient] = None) -> str:
    """
    Handle 'register' command.

    Args:
        cmd: RegisterCommand with username and password
        client: Optional ChatVaultClient for dependency injection (testing)
    """
    if client is None:
        client = get_client()
    return client.register(cmd.username, cmd.password)


def handle_login(cmd: LoginCommand, client: Optional[ChatVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.login(cmd.username, cmd.password)


def handle_logout(cmd: LogoutCommand, client: Optional[ChatVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.logout()


def handle_upload(cmd: UploadCommand, client: Optional[ChatVaultClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with the file path and optional thumbnail path
        client: Optional ChatVaultClient for dependency injection (testing)

    Returns:
        Success or error message with the new transfer id
    """
    logger.info(f"Executing upload command: path={cmd.path}")
    if client is None:
        client = get_client()
    return client.upload(cmd.path, cmd.thumbnail_path)


def handle_list(cmd: ListCommand, client: Optional[ChatVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.list_transfers()


def handle_info(cmd: InfoCommand, client: Optional[ChatVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.info(cmd.transfer_id)


def handle_download(cmd: DownloadCommand, client: Optional[ChatVaultClient] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with transfer id and optional output path
        client: Optional ChatVaultClient for dependency injection (testing)

    Returns:
        Success or error message with download results
    """
    logger.info(f"Executing download command: transfer_id={cmd.transfer_id} output_path={cmd.output_path}")
    if client is None:
        client = get_client()
    return client.download(cmd.transfer_id, cmd.output_path)


def handle_delete(cmd: DeleteCommand, client: Optional[ChatVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.delete(cmd.transfer_id)


HANDLERS = {
    RegisterCommand: handle_register,
    LoginCommand: handle_login,
    LogoutCommand: handle_logout,
    UploadCommand: handle_upload,
    ListCommand: handle_list,
    InfoCommand: handle_info,
    DownloadCommand: handle_download,
    DeleteCommand: handle_delete,
}


def dispatch_command(cmd_obj: CommandRequest, client: Optional[ChatVaultClient] = None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj, client=client)
