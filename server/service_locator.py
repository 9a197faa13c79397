"""Service locator for the process-wide blob store client."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from server import config
from server.blob_store import BlobStore, LocalBlobStore, TelegramBlobStore

logger = get_logger(__name__)

_blob_store: Optional[BlobStore] = None


def create_blob_store() -> BlobStore:
    """
    Build the blob store selected by CHATVAULT_BLOB_BACKEND.
    """
    backend = config.BLOB_BACKEND.lower()
    if backend == "telegram":
        logger.info("Using Telegram blob store")
        return TelegramBlobStore(
            bot_token=config.TELEGRAM_BOT_TOKEN,
            chat_id=config.TELEGRAM_CHAT_ID,
            api_base=config.TELEGRAM_API_URL,
            timeout=config.BLOB_TIMEOUT_SECONDS,
        )
    if backend == "local":
        logger.info(f"Using local blob store at {config.LOCAL_BLOB_PATH}")
        return LocalBlobStore(Path(config.LOCAL_BLOB_PATH))
    raise ValueError(f"Unknown blob backend: {config.BLOB_BACKEND}")


def set_blob_store(store: Optional[BlobStore]) -> None:
    """Set global blob store instance"""
    global _blob_store
    _blob_store = store


def get_blob_store() -> BlobStore:
    """Get global blob store instance, creating it on first use"""
    global _blob_store
    if _blob_store is None:
        _blob_store = create_blob_store()
    return _blob_store


async def close_blob_store() -> None:
    global _blob_store
    if _blob_store is not None:
        await _blob_store.close()
        _blob_store = None
