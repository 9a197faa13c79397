"""Fetch-and-reassemble pipeline for the read side of a transfer."""

import asyncio
import contextlib
from typing import List, Optional, Sequence

from common.chunk_codec import join, verify_checksum
from common.logging_config import get_logger
from server.blob_store import BlobStore
from server.exceptions import BlobNotFoundError, BlobStoreUnavailableError, BlobTooLargeError
from server.transfer.outcome import DownloadOutcome, TransferErrorKind

logger = get_logger(__name__)


class _IntegrityMismatch(Exception):
    pass


class TransferDownloader:
    """
    Fetches the blobs of a transfer and joins them in recorded order.

    Fetches run concurrently and land in slots indexed by chunk position,
    so completion order never affects the result. Any failed fetch fails
    the whole download; no partial bytes are returned. There is no retry
    policy here.

    The caller must already have verified that the requesting user owns the
    transfer these chunk ids belong to.
    """

    def __init__(self, blob_store: BlobStore, max_concurrency: Optional[int] = None):
        self.blob_store = blob_store
        self.max_concurrency = max_concurrency or None

    async def download(
        self,
        chunk_ids: Sequence[str],
        checksums: Optional[Sequence[str]] = None,
        sizes: Optional[Sequence[int]] = None,
    ) -> DownloadOutcome:
        """
        Fetch and reassemble the payload identified by chunk_ids.

        Args:
            chunk_ids: Blob ids in chunk order
            checksums: Optional SHA-256 digests, one per chunk, to verify against
            sizes: Optional byte lengths, one per chunk, to verify against

        Returns:
            DownloadOutcome with the joined bytes, or an error kind
        """
        if not chunk_ids:
            return DownloadOutcome.failed(TransferErrorKind.INVALID_INPUT, "No chunks to download")
        for label, values in (("checksums", checksums), ("sizes", sizes)):
            if values is not None and len(values) != len(chunk_ids):
                return DownloadOutcome.failed(
                    TransferErrorKind.INVALID_INPUT,
                    f"Got {len(values)} {label} for {len(chunk_ids)} chunks"
                )

        total = len(chunk_ids)
        slots: List[Optional[bytes]] = [None] * total
        limiter = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def fetch(index: int) -> None:
            async with limiter if limiter else contextlib.nullcontext():
                data = await self.blob_store.get(chunk_ids[index])
            if sizes is not None and len(data) != sizes[index]:
                raise _IntegrityMismatch(
                    f"Chunk {index + 1}/{total} ({chunk_ids[index]}) is {len(data)} bytes, expected {sizes[index]}"
                )
            if checksums is not None and not verify_checksum(data, checksums[index]):
                raise _IntegrityMismatch(f"Chunk {index + 1}/{total} ({chunk_ids[index]}) failed checksum verification")
            slots[index] = data
            logger.debug(f"Fetched chunk {index + 1}/{total} ({len(data)} bytes)")

        tasks = [asyncio.create_task(fetch(index)) for index in range(total)]
        try:
            await asyncio.gather(*tasks)
        except BlobNotFoundError as e:
            logger.error(f"Reassembly aborted, chunk missing: {e}")
            return DownloadOutcome.failed(TransferErrorKind.CHUNK_NOT_FOUND, str(e))
        except BlobStoreUnavailableError as e:
            logger.error(f"Reassembly aborted, blob store unavailable: {e}")
            return DownloadOutcome.failed(TransferErrorKind.BLOB_STORE_UNAVAILABLE, str(e))
        except BlobTooLargeError as e:
            logger.error(f"Reassembly aborted, chunk over the download limit: {e}")
            return DownloadOutcome.failed(TransferErrorKind.BLOB_TOO_LARGE, str(e))
        except _IntegrityMismatch as e:
            logger.error(f"Reassembly aborted: {e}")
            return DownloadOutcome.failed(TransferErrorKind.CHECKSUM_MISMATCH, str(e))
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        data = join(slots)
        logger.info(f"Reassembled {total} chunk(s) into {len(data)} bytes")
        return DownloadOutcome(data=data)
