"""Configuration settings for the ChatVault server."""

import os

from common.constants import (
    CHUNK_SIZE_BYTES,
    DEFAULT_BLOB_STORE_TIMEOUT_SECONDS,
    DEFAULT_UPLOAD_CONCURRENCY,
    MAX_SINGLE_BLOB_SIZE_BYTES,
    TELEGRAM_API_BASE,
)


DATABASE_PATH = os.environ.get("CHATVAULT_DATABASE_PATH", "./data/metadata.db")

SERVER_HOST = os.environ.get("CHATVAULT_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("CHATVAULT_PORT", "8000"))

API_KEY_PREFIX = "cv_"

# "telegram" stores blobs as chat documents, "local" as files on disk
BLOB_BACKEND = os.environ.get("CHATVAULT_BLOB_BACKEND", "telegram")

LOCAL_BLOB_PATH = os.environ.get("CHATVAULT_LOCAL_BLOB_PATH", "./data/blobs")

TELEGRAM_BOT_TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN", "")

TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID", "")

TELEGRAM_API_URL = os.environ.get("TELEGRAM_API_BASE", TELEGRAM_API_BASE)

BLOB_TIMEOUT_SECONDS = float(
    os.environ.get("CHATVAULT_BLOB_TIMEOUT_SECONDS", str(DEFAULT_BLOB_STORE_TIMEOUT_SECONDS))
)

# The cloud Bot API serves getFile downloads only up to 20 MB. Single blobs
# between that ceiling and this threshold upload fine but fail on download
# with BLOB_TOO_LARGE unless TELEGRAM_API_BASE points at a self-hosted server.
MAX_SINGLE_BLOB_BYTES = int(
    os.environ.get("CHATVAULT_MAX_SINGLE_BLOB_BYTES", str(MAX_SINGLE_BLOB_SIZE_BYTES))
)

CHUNK_SIZE = int(os.environ.get("CHATVAULT_CHUNK_SIZE_BYTES", str(CHUNK_SIZE_BYTES)))

UPLOAD_CONCURRENCY = int(
    os.environ.get("CHATVAULT_UPLOAD_CONCURRENCY", str(DEFAULT_UPLOAD_CONCURRENCY))
)

# 0 means every chunk of a transfer is fetched at once
DOWNLOAD_CONCURRENCY = int(os.environ.get("CHATVAULT_DOWNLOAD_CONCURRENCY", "0"))

if CHUNK_SIZE > MAX_SINGLE_BLOB_BYTES:
    raise ValueError(
        f"CHATVAULT_CHUNK_SIZE_BYTES ({CHUNK_SIZE}) must not exceed "
        f"CHATVAULT_MAX_SINGLE_BLOB_BYTES ({MAX_SINGLE_BLOB_BYTES})"
    )
