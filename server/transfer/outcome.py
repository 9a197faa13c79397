"""Result values returned by the transfer core instead of raised exceptions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from common.types import ChunkDescriptor
from server.exceptions import (
    BlobStoreUnavailableError,
    BlobTooLargeError,
    ChatVaultError,
    ChecksumMismatchError,
    ChunkNotFoundError,
    EmptyFileError,
    InvalidInputError,
)


class TransferErrorKind(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    EMPTY_FILE = "EMPTY_FILE"
    BLOB_STORE_UNAVAILABLE = "BLOB_STORE_UNAVAILABLE"
    CHUNK_NOT_FOUND = "CHUNK_NOT_FOUND"
    BLOB_TOO_LARGE = "BLOB_TOO_LARGE"
    CHECKSUM_MISMATCH = "CHECKSUM_MISMATCH"


_ERRORS = {
    TransferErrorKind.INVALID_INPUT: InvalidInputError,
    TransferErrorKind.EMPTY_FILE: EmptyFileError,
    TransferErrorKind.BLOB_STORE_UNAVAILABLE: BlobStoreUnavailableError,
    TransferErrorKind.CHUNK_NOT_FOUND: ChunkNotFoundError,
    TransferErrorKind.BLOB_TOO_LARGE: BlobTooLargeError,
    TransferErrorKind.CHECKSUM_MISMATCH: ChecksumMismatchError,
}


def error_for(kind: TransferErrorKind, message: str) -> ChatVaultError:
    return _ERRORS[kind](message)


@dataclass(frozen=True)
class UploadOutcome:
    """
    Result of one upload attempt.

    On success chunks holds one descriptor per blob in split order. On
    failure chunks is empty and orphaned_blob_ids lists blobs that were
    stored before the failure; they are left in the blob store.
    """
    chunks: List[ChunkDescriptor] = field(default_factory=list)
    size: int = 0
    error: Optional[TransferErrorKind] = None
    message: str = ""
    orphaned_blob_ids: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def chunk_ids(self) -> List[str]:
        return [chunk.blob_id for chunk in self.chunks]

    @classmethod
    def failed(cls, kind: TransferErrorKind, message: str, orphaned_blob_ids=()) -> "UploadOutcome":
        return cls(error=kind, message=message, orphaned_blob_ids=list(orphaned_blob_ids))

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise error_for(self.error, self.message)


@dataclass(frozen=True)
class DownloadOutcome:
    """
    Result of one reassembly attempt; data is None unless every chunk arrived.
    """
    data: Optional[bytes] = None
    error: Optional[TransferErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, kind: TransferErrorKind, message: str) -> "DownloadOutcome":
        return cls(error=kind, message=message)

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise error_for(self.error, self.message)
