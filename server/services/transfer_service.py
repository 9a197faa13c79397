"""Transfer service: ownership checks around the chunked transfer core."""

import base64
import binascii
from datetime import datetime
from typing import BinaryIO, List, Optional

from common.logging_config import get_logger
from server import config
from server.blob_store import BlobStore
from server.exceptions import (
    AccessDeniedError,
    BlobNotFoundError,
    ChunkNotFoundError,
    InvalidInputError,
    RecordStoreError,
)
from server.repositories.transfer_repository import Transfer, TransferRepository
from server.service_locator import get_blob_store
from server.transfer.downloader import TransferDownloader
from server.transfer.uploader import TransferUploader
from server.utils import generate_uuid, sanitize_filename

logger = get_logger(__name__)

MAX_THUMBNAIL_BYTES = 512 * 1024


class TransferService:
    """
    Request-scoped entry point for transfer operations.

    Every method takes the authenticated user_id explicitly. Reads,
    downloads and deletions of a transfer the user does not own fail with
    the same AccessDeniedError as an unknown id.
    """

    def __init__(
        self,
        blob_store: Optional[BlobStore] = None,
        max_single_blob_size: Optional[int] = None,
        chunk_size: Optional[int] = None,
        upload_concurrency: Optional[int] = None,
        download_concurrency: Optional[int] = None,
    ):
        self.blob_store = blob_store if blob_store is not None else get_blob_store()
        self.transfer_repo = TransferRepository()
        self.max_single_blob_size = max_single_blob_size or config.MAX_SINGLE_BLOB_BYTES
        self.chunk_size = chunk_size or config.CHUNK_SIZE
        self.uploader = TransferUploader(self.blob_store, upload_concurrency or config.UPLOAD_CONCURRENCY)
        self.downloader = TransferDownloader(
            self.blob_store,
            download_concurrency if download_concurrency is not None else config.DOWNLOAD_CONCURRENCY,
        )

    async def upload_transfer(
        self,
        owner_id: str,
        original_name: Optional[str],
        file_data: BinaryIO,
        file_size: int,
        thumbnail: Optional[str] = None,
    ) -> Transfer:
        """
        Store a file in the blob store and record it as one transfer.

        Raises:
            InvalidInputError: Missing filename, bad thumbnail, or size mismatch
            EmptyFileError: Zero-length file
            BlobStoreUnavailableError: Any chunk failed to store
            RecordStoreError: Chunks are stored but the record could not be written
        """
        name = sanitize_filename(original_name)
        if not name:
            raise InvalidInputError("A filename is required")
        thumbnail = self._validate_thumbnail(thumbnail)

        outcome = await self.uploader.upload_stream(
            file_data,
            file_size,
            name,
            self.max_single_blob_size,
            self.chunk_size,
        )
        outcome.raise_for_error()

        transfer = Transfer(
            transfer_id=generate_uuid(),
            owner_id=owner_id,
            original_name=name,
            size=outcome.size,
            created_at=datetime.utcnow(),
            chunks=outcome.chunks,
            thumbnail=thumbnail,
        )

        try:
            self.transfer_repo.save(transfer)
        except RecordStoreError:
            logger.error(
                f"Chunks for '{name}' are stored but the transfer record failed; "
                f"unreferenced blobs: {outcome.chunk_ids} [owner_id={owner_id}]"
            )
            raise

        logger.info(
            f"Recorded transfer {transfer.transfer_id} '{name}' "
            f"({transfer.size} bytes, {len(transfer.chunks)} chunks) [owner_id={owner_id}]"
        )
        return transfer

    def list_transfers(self, user_id: str) -> List[Transfer]:
        return self.transfer_repo.list_by_owner(user_id)

    def get_transfer(self, transfer_id: str, user_id: str) -> Transfer:
        transfer = self.transfer_repo.get_by_id(transfer_id)
        if transfer is None or transfer.owner_id != user_id:
            logger.warning(f"Access denied to transfer {transfer_id} [user_id={user_id}]")
            raise AccessDeniedError("Transfer not found or access denied")
        return transfer

    async def download_transfer(self, transfer_id: str, user_id: str) -> tuple[Transfer, bytes]:
        """
        Reassemble a transfer server-side.

        Returns:
            The transfer record and its full, byte-exact contents
        """
        transfer = self.get_transfer(transfer_id, user_id)

        outcome = await self.downloader.download(
            transfer.chunk_ids,
            [chunk.checksum for chunk in transfer.chunks],
            [chunk.size for chunk in transfer.chunks],
        )
        outcome.raise_for_error()

        logger.info(f"Reassembled transfer {transfer_id} ({len(outcome.data)} bytes) [user_id={user_id}]")
        return transfer, outcome.data

    async def fetch_blob(self, blob_id: str, user_id: str) -> bytes:
        """
        Fetch a single chunk for client-side reassembly.
        """
        if not self.transfer_repo.owner_has_blob(user_id, blob_id):
            logger.warning(f"Access denied to blob {blob_id} [user_id={user_id}]")
            raise AccessDeniedError("Transfer not found or access denied")

        try:
            return await self.blob_store.get(blob_id)
        except BlobNotFoundError as e:
            raise ChunkNotFoundError(f"Chunk {blob_id} can no longer be fetched: {e}") from e

    def delete_transfer(self, transfer_id: str, user_id: str) -> None:
        """
        Delete the transfer record. Its blobs stay in the blob store.
        """
        if not self.transfer_repo.delete_by_id(transfer_id, user_id):
            logger.warning(f"Delete denied for transfer {transfer_id} [user_id={user_id}]")
            raise AccessDeniedError("Transfer not found or access denied")
        logger.info(f"Deleted transfer {transfer_id} [user_id={user_id}]")

    @staticmethod
    def _validate_thumbnail(thumbnail: Optional[str]) -> Optional[str]:
        if not thumbnail:
            return None
        try:
            raw = base64.b64decode(thumbnail, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidInputError("Thumbnail must be base64-encoded")
        if len(raw) > MAX_THUMBNAIL_BYTES:
            raise InvalidInputError(f"Thumbnail exceeds {MAX_THUMBNAIL_BYTES} bytes")
        return thumbnail
