"""Transfer and blob API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response

from common.logging_config import get_logger
from server.auth import get_current_user
from server.blob_store import BlobStore
from server.schemas.common import error_responses
from server.schemas.transfers import (
    DeleteTransferResponse,
    ListTransfersResponse,
    TransferManifestResponse,
    manifest_from_transfer,
    summary_from_transfer,
)
from server.service_locator import get_blob_store
from server.services.transfer_service import TransferService
from server.utils import content_disposition

logger = get_logger(__name__)

router = APIRouter(
    prefix="/transfers",
    tags=["Transfers"],
    responses=error_responses(400, 401, 403, 404, 500, 502, 503),
)

blob_router = APIRouter(
    prefix="/blobs",
    tags=["Blobs"],
    responses=error_responses(401, 403, 404, 502, 503),
)


def get_transfer_service(blob_store: BlobStore = Depends(get_blob_store)) -> TransferService:
    return TransferService(blob_store=blob_store)


@router.post("", response_model=TransferManifestResponse, status_code=status.HTTP_201_CREATED)
async def upload_transfer(
    file: UploadFile = File(...),
    thumbnail: Optional[str] = Form(None),
    current_user: str = Depends(get_current_user),
    transfer_service: TransferService = Depends(get_transfer_service),
):
    """
    Upload a file, chunking it when it exceeds the single-blob threshold.

    Parameters:
        - file: File to upload (multipart/form-data)
        - thumbnail: Optional base64 preview image stored with the record
        - Authorization header: Bearer <api_key> (required)

    Returns:
        - The manifest of the new transfer

    Raises:
        - 400: Missing filename, empty file, or invalid thumbnail
        - 401: Invalid or missing API Key
        - 500: Chunks stored but the record could not be written
        - 503: Blob store unavailable
    """
    stream = file.file
    try:
        stream.seek(0, 2)
        file_size = stream.tell()
        stream.seek(0)

        transfer = await transfer_service.upload_transfer(
            owner_id=current_user,
            original_name=file.filename,
            file_data=stream,
            file_size=file_size,
            thumbnail=thumbnail,
        )
    finally:
        try:
            await file.close()
        except OSError as e:
            logger.warning(f"Failed to close spooled upload file: {e}")

    return manifest_from_transfer(transfer)


@router.get("", response_model=ListTransfersResponse)
async def list_transfers(
    current_user: str = Depends(get_current_user),
    transfer_service: TransferService = Depends(get_transfer_service),
):
    """
    List the caller's transfers, most recent first.
    """
    transfers = transfer_service.list_transfers(current_user)
    return ListTransfersResponse(transfers=[summary_from_transfer(t) for t in transfers])


@router.get("/{transfer_id}", response_model=TransferManifestResponse)
async def get_transfer(
    transfer_id: str,
    current_user: str = Depends(get_current_user),
    transfer_service: TransferService = Depends(get_transfer_service),
):
    """
    Return the manifest needed for client-side reassembly.

    Raises:
        - 403: Transfer unknown or owned by another user
    """
    transfer = transfer_service.get_transfer(transfer_id, current_user)
    return manifest_from_transfer(transfer)


@router.get("/{transfer_id}/download")
async def download_transfer(
    transfer_id: str,
    current_user: str = Depends(get_current_user),
    transfer_service: TransferService = Depends(get_transfer_service),
):
    """
    Reassemble a transfer server-side and return it as an attachment.

    Raises:
        - 403: Transfer unknown or owned by another user
        - 404: A recorded chunk can no longer be fetched
        - 502: A chunk failed checksum verification
        - 503: Blob store unavailable
    """
    transfer, data = await transfer_service.download_transfer(transfer_id, current_user)

    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": content_disposition(transfer.original_name)},
    )


@router.delete("/{transfer_id}", response_model=DeleteTransferResponse)
async def delete_transfer(
    transfer_id: str,
    current_user: str = Depends(get_current_user),
    transfer_service: TransferService = Depends(get_transfer_service),
):
    """
    Delete a transfer record. Its blobs are left in the blob store.
    """
    transfer_service.delete_transfer(transfer_id, current_user)
    return DeleteTransferResponse(transfer_id=transfer_id, deleted=True)


@blob_router.get("/{blob_id}")
async def fetch_blob(
    blob_id: str,
    current_user: str = Depends(get_current_user),
    transfer_service: TransferService = Depends(get_transfer_service),
):
    """
    Fetch one chunk of a transfer the caller owns.

    Raises:
        - 403: Blob is not part of any of the caller's transfers
        - 404: Blob can no longer be fetched
        - 503: Blob store unavailable
    """
    data = await transfer_service.fetch_blob(blob_id, current_user)
    return Response(content=data, media_type="application/octet-stream")
