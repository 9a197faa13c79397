"""Pydantic schemas for transfer endpoints."""

from typing import List, Optional

from pydantic import BaseModel

from server.repositories.transfer_repository import Transfer
from server.utils import infer_preview_type


class ChunkResponse(BaseModel):
    """One chunk of a transfer, in reassembly order."""
    blob_id: str
    chunk_index: int
    size: int
    checksum: str


class TransferSummaryResponse(BaseModel):
    """Response model for a transfer in a listing."""
    transfer_id: str
    original_name: str
    size: int
    chunk_count: int
    created_at: str
    preview_type: Optional[str] = None
    thumbnail: Optional[str] = None


class TransferManifestResponse(TransferSummaryResponse):
    """Response model carrying everything needed for client-side reassembly."""
    chunk_ids: List[str]
    chunks: List[ChunkResponse]


class ListTransfersResponse(BaseModel):
    """Response model for transfer listing, most recent first."""
    transfers: List[TransferSummaryResponse]


class DeleteTransferResponse(BaseModel):
    """Response model for transfer deletion."""
    transfer_id: str
    deleted: bool


def summary_from_transfer(transfer: Transfer) -> TransferSummaryResponse:
    return TransferSummaryResponse(
        transfer_id=transfer.transfer_id,
        original_name=transfer.original_name,
        size=transfer.size,
        chunk_count=len(transfer.chunks),
        created_at=transfer.created_at.isoformat(),
        preview_type=infer_preview_type(transfer.original_name),
        thumbnail=transfer.thumbnail,
    )


def manifest_from_transfer(transfer: Transfer) -> TransferManifestResponse:
    return TransferManifestResponse(
        **summary_from_transfer(transfer).model_dump(),
        chunk_ids=transfer.chunk_ids,
        chunks=[
            ChunkResponse(
                blob_id=chunk.blob_id,
                chunk_index=chunk.chunk_index,
                size=chunk.size,
                checksum=chunk.checksum,
            )
            for chunk in transfer.chunks
        ],
    )
