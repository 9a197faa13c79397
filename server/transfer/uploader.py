"""Split-and-store pipeline for the write side of a transfer."""

import asyncio
import io
from typing import BinaryIO, List, Optional

from common.chunk_codec import chunk_count, compute_checksum, iter_split
from common.constants import DEFAULT_UPLOAD_CONCURRENCY
from common.logging_config import get_logger
from common.types import ChunkDescriptor
from server.blob_store import BlobStore
from server.exceptions import ChatVaultError
from server.transfer.outcome import TransferErrorKind, UploadOutcome

logger = get_logger(__name__)


def chunk_blob_name(original_name: str, index: int, total: int) -> str:
    if total == 1:
        return original_name
    return f"{original_name}.part{index + 1}of{total}"


class TransferUploader:
    """
    Stores a payload in the blob store as one blob or as ordered chunks.

    An upload is all-or-nothing from the caller's point of view: either
    every chunk is stored and the outcome lists them in split order, or the
    outcome carries an error kind. The first failed put cancels the puts
    still in flight. Stored blobs are never retracted, so a failed attempt
    leaves its already-stored chunks behind as orphans.

    Callers are expected to have authenticated the uploader; no ownership
    is recorded at this layer.
    """

    def __init__(self, blob_store: BlobStore, max_concurrency: int = DEFAULT_UPLOAD_CONCURRENCY):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self.blob_store = blob_store
        self.max_concurrency = max_concurrency

    async def upload(
        self,
        data: bytes,
        original_name: str,
        max_single_blob_size: int,
        max_chunk_size: int,
    ) -> UploadOutcome:
        return await self.upload_stream(
            io.BytesIO(data),
            len(data),
            original_name,
            max_single_blob_size,
            max_chunk_size,
        )

    async def upload_stream(
        self,
        stream: BinaryIO,
        size: int,
        original_name: str,
        max_single_blob_size: int,
        max_chunk_size: int,
    ) -> UploadOutcome:
        """
        Upload size bytes read from stream.

        Payloads of at most max_single_blob_size bytes are stored as a single
        blob; larger ones are split into max_chunk_size chunks, read one at a
        time, with at most max_concurrency puts in flight.

        Args:
            stream: Binary stream positioned at the start of the payload
            size: Declared payload length in bytes
            original_name: Client-supplied filename
            max_single_blob_size: Largest payload stored without chunking
            max_chunk_size: Chunk length used above the threshold

        Returns:
            UploadOutcome with ordered chunk descriptors, or an error kind
        """
        if not original_name or not original_name.strip():
            return UploadOutcome.failed(TransferErrorKind.INVALID_INPUT, "A filename is required")
        if size == 0:
            return UploadOutcome.failed(TransferErrorKind.EMPTY_FILE, f"File '{original_name}' is empty")
        if size < 0 or max_single_blob_size <= 0 or max_chunk_size <= 0:
            return UploadOutcome.failed(
                TransferErrorKind.INVALID_INPUT,
                f"Invalid sizes: size={size} max_single_blob_size={max_single_blob_size} "
                f"max_chunk_size={max_chunk_size}"
            )

        if size <= max_single_blob_size:
            piece_size, total = size, 1
        else:
            piece_size, total = max_chunk_size, chunk_count(size, max_chunk_size)

        logger.info(f"Uploading '{original_name}' ({size} bytes) as {total} blob(s)")

        descriptors: List[Optional[ChunkDescriptor]] = [None] * total
        slots = asyncio.Semaphore(self.max_concurrency)
        tasks: List[asyncio.Task] = []

        async def put_chunk(index: int, chunk: bytes) -> None:
            try:
                blob_id = await self.blob_store.put(chunk, chunk_blob_name(original_name, index, total))
                descriptors[index] = ChunkDescriptor(
                    blob_id=blob_id,
                    chunk_index=index,
                    size=len(chunk),
                    checksum=compute_checksum(chunk),
                )
                logger.debug(f"Stored chunk {index + 1}/{total} of '{original_name}' as {blob_id}")
            finally:
                slots.release()

        def has_failure() -> bool:
            return any(task.done() and task.exception() is not None for task in tasks)

        mismatch = None
        read_bytes = 0
        try:
            for index, chunk in enumerate(iter_split(stream, piece_size)):
                if index >= total:
                    mismatch = f"File '{original_name}' is larger than its declared size of {size} bytes"
                    break
                read_bytes += len(chunk)
                await slots.acquire()
                if has_failure():
                    slots.release()
                    break
                tasks.append(asyncio.create_task(put_chunk(index, chunk)))
            if tasks:
                await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            results = await asyncio.gather(*tasks, return_exceptions=True)

        stored = [d.blob_id for d in descriptors if d is not None]
        errors = [
            r for r in results
            if isinstance(r, BaseException) and not isinstance(r, asyncio.CancelledError)
        ]

        for error in errors:
            if not isinstance(error, ChatVaultError):
                raise error

        if errors:
            logger.error(
                f"Upload of '{original_name}' failed: {errors[0]}. "
                f"Leaving {len(stored)} stored chunk(s) orphaned: {stored}"
            )
            return UploadOutcome.failed(TransferErrorKind.BLOB_STORE_UNAVAILABLE, str(errors[0]), stored)

        if mismatch is None and (read_bytes != size or len(stored) != total):
            mismatch = f"File '{original_name}' is {read_bytes} bytes, expected {size}"
        if mismatch is not None:
            logger.error(f"{mismatch}. Leaving {len(stored)} stored chunk(s) orphaned")
            return UploadOutcome.failed(TransferErrorKind.INVALID_INPUT, mismatch, stored)

        logger.info(f"Uploaded '{original_name}' as {total} blob(s)")
        return UploadOutcome(chunks=list(descriptors), size=size)
