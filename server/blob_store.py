"""Blob store clients: opaque named payloads in, opaque identifiers out."""

import asyncio
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiohttp

from common.logging_config import get_logger
from server.exceptions import BlobNotFoundError, BlobStoreUnavailableError, BlobTooLargeError

logger = get_logger(__name__)

_NOT_FOUND_MARKERS = ("invalid file_id", "wrong file identifier", "file not found", "wrong remote file")
_TOO_BIG_MARKER = "file is too big"


class BlobStore(ABC):
    """
    put(data, name) -> blob_id and get(blob_id) -> bytes.

    Implementations raise BlobStoreUnavailableError for network, quota and
    backend failures, and BlobNotFoundError when get() cannot resolve an id.
    Retries, if any, belong to the implementation.
    """

    @abstractmethod
    async def put(self, data: bytes, name: str) -> str:
        ...

    @abstractmethod
    async def get(self, blob_id: str) -> bytes:
        ...

    async def close(self) -> None:
        """Release network resources held by the client."""

    async def ping(self) -> bool:
        return True


class TelegramBlobStore(BlobStore):
    """
    Stores blobs as documents posted to a Telegram chat through the Bot API.

    The cloud Bot API caps downloads via getFile at 20 MB and answers
    "file is too big" above it, which surfaces as BlobTooLargeError. A
    self-hosted Bot API server lifts that ceiling.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        api_base: str = "https://api.telegram.org",
        timeout: float = 300.0,
    ):
        """
        Initialize client with lazy session creation.

        Args:
            bot_token: Telegram bot token
            chat_id: Chat the bot posts documents to
            api_base: Bot API base URL
            timeout: Total timeout per request in seconds
        """
        if not bot_token or not chat_id:
            raise ValueError("TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID must be set for the telegram backend")

        self._bot_url = f"{api_base.rstrip('/')}/bot{bot_token}"
        self._file_url = f"{api_base.rstrip('/')}/file/bot{bot_token}"
        self._chat_id = chat_id
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def put(self, data: bytes, name: str) -> str:
        form = aiohttp.FormData()
        form.add_field("chat_id", self._chat_id)
        form.add_field("caption", f"Uploaded: {name}")
        form.add_field("document", data, filename=name, content_type="application/octet-stream")

        payload = await self._call("POST", f"{self._bot_url}/sendDocument", data=form)

        try:
            file_id = payload["result"]["document"]["file_id"]
        except (KeyError, TypeError) as e:
            raise BlobStoreUnavailableError(f"Unexpected sendDocument response for {name}") from e

        logger.info(f"Stored blob {name} ({len(data)} bytes) as {file_id}")
        return file_id

    async def get(self, blob_id: str) -> bytes:
        payload = await self._call("GET", f"{self._bot_url}/getFile", params={"file_id": blob_id})

        file_path = (payload.get("result") or {}).get("file_path")
        if not file_path:
            raise BlobNotFoundError(f"Blob {blob_id} has no downloadable file")

        session = self._ensure_session()
        try:
            async with session.get(f"{self._file_url}/{file_path}") as resp:
                if resp.status == 404:
                    raise BlobNotFoundError(f"Blob {blob_id} not found")
                if resp.status != 200:
                    raise BlobStoreUnavailableError(f"Blob download failed with status {resp.status}")
                data = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise BlobStoreUnavailableError(f"Blob store unreachable: {type(e).__name__}") from e

        logger.debug(f"Fetched blob {blob_id} ({len(data)} bytes)")
        return data

    async def ping(self) -> bool:
        payload = await self._call("GET", f"{self._bot_url}/getMe")
        return bool(payload.get("ok"))

    async def _call(self, method: str, url: str, **kwargs) -> dict:
        """
        Perform a Bot API call and return its decoded JSON body.

        Raises:
            BlobNotFoundError: If the API rejects a file identifier
            BlobTooLargeError: If the API refuses a file over its download limit
            BlobStoreUnavailableError: On any other failure
        """
        session = self._ensure_session()
        try:
            async with session.request(method, url, **kwargs) as resp:
                try:
                    payload = await resp.json(content_type=None)
                except ValueError:
                    payload = {}
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise BlobStoreUnavailableError(f"Blob store unreachable: {type(e).__name__}") from e

        if status == 200 and payload.get("ok"):
            return payload

        description = str(payload.get("description", f"HTTP {status}"))
        if status == 400 and any(marker in description.lower() for marker in _NOT_FOUND_MARKERS):
            raise BlobNotFoundError(description)
        if status == 400 and _TOO_BIG_MARKER in description.lower():
            raise BlobTooLargeError(description)

        logger.warning(f"Telegram API call failed: status={status} description={description}")
        raise BlobStoreUnavailableError(f"Blob store rejected request: {description}")


class LocalBlobStore(BlobStore):
    """
    Directory-backed blob store for development and tests.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _blob_path(self, blob_id: str) -> Path:
        # blob ids are generated hex uuids; anything else cannot exist here
        if not blob_id or not all(c in "0123456789abcdef" for c in blob_id):
            raise BlobNotFoundError(f"Blob {blob_id} not found")
        return self.root / f"{blob_id}.blob"

    async def put(self, data: bytes, name: str) -> str:
        blob_id = uuid.uuid4().hex
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(self._blob_path(blob_id).write_bytes, data)
        except OSError as e:
            raise BlobStoreUnavailableError(f"Cannot write blob for {name}: {e}") from e
        logger.debug(f"Stored blob {name} ({len(data)} bytes) as {blob_id}")
        return blob_id

    async def get(self, blob_id: str) -> bytes:
        path = self._blob_path(blob_id)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            raise BlobNotFoundError(f"Blob {blob_id} not found") from e
        except OSError as e:
            raise BlobStoreUnavailableError(f"Cannot read blob {blob_id}: {e}") from e

    async def ping(self) -> bool:
        return self.root.exists() or self.root.parent.exists()
