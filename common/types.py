"""Shared data type definitions (ChunkDescriptor, TransferManifest)."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class ChunkDescriptor:
    """
    Location and integrity data for one chunk of a transfer.
    """
    blob_id: str
    chunk_index: int
    size: int
    checksum: str


@dataclass(frozen=True)
class TransferManifest:
    """
    Everything a client needs to fetch and reassemble a transfer.
    """
    transfer_id: str
    original_name: str
    size: int
    chunks: List[ChunkDescriptor]
    created_at: datetime
    preview_type: Optional[str] = None

    @property
    def chunk_ids(self) -> List[str]:
        return [chunk.blob_id for chunk in self.chunks]

    @classmethod
    def from_dict(cls, data: dict) -> 'TransferManifest':
        """Build a manifest from the server's JSON representation."""
        chunks = sorted(
            (
                ChunkDescriptor(
                    blob_id=chunk['blob_id'],
                    chunk_index=chunk['chunk_index'],
                    size=chunk['size'],
                    checksum=chunk['checksum'],
                )
                for chunk in data['chunks']
            ),
            key=lambda chunk: chunk.chunk_index,
        )
        return cls(
            transfer_id=data['transfer_id'],
            original_name=data['original_name'],
            size=data['size'],
            chunks=chunks,
            created_at=datetime.fromisoformat(data['created_at']),
            preview_type=data.get('preview_type'),
        )
