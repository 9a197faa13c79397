"""End-to-end tests for TransferService against a temp database and in-memory blobs."""

import base64
import io
import os

import pytest

from common.constants import MIB
from server.database import get_db_connection
from server.exceptions import (
    AccessDeniedError,
    BlobStoreUnavailableError,
    ChecksumMismatchError,
    ChunkNotFoundError,
    EmptyFileError,
    InvalidInputError,
    RecordStoreError,
)
from server.services.transfer_service import TransferService
from tests.blob_fakes import InMemoryBlobStore


async def _upload(service, owner_id, data, name="file.bin", thumbnail=None):
    return await service.upload_transfer(owner_id, name, io.BytesIO(data), len(data), thumbnail)


class TestScenarios:
    @pytest.mark.asyncio
    async def test_small_file_is_one_blob(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        data = os.urandom(5 * MIB)

        transfer = await _upload(service, users["alice"], data, "photo.jpg")

        assert len(transfer.chunk_ids) == 1
        assert blob_store.put_names == ["photo.jpg"]
        _, downloaded = await service.download_transfer(transfer.transfer_id, users["alice"])
        assert downloaded == data

    @pytest.mark.asyncio
    async def test_large_file_is_three_chunks(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        data = os.urandom(45 * MIB)

        transfer = await _upload(service, users["alice"], data, "video.mp4")

        assert [c.size for c in transfer.chunks] == [19 * MIB, 19 * MIB, 7 * MIB]
        _, downloaded = await service.download_transfer(transfer.transfer_id, users["alice"])
        assert downloaded == data

    @pytest.mark.asyncio
    async def test_metadata_write_failure_records_nothing(self, users, blob_store):
        with get_db_connection() as conn:
            conn.execute(
                "CREATE TRIGGER reject_transfers BEFORE INSERT ON transfers "
                "BEGIN SELECT RAISE(ABORT, 'record store offline'); END"
            )
            conn.commit()
        service = TransferService(blob_store=blob_store)

        with pytest.raises(RecordStoreError):
            await _upload(service, users["alice"], b"payload")

        assert service.list_transfers(users["alice"]) == []
        # the blob was stored before the record write failed and stays behind
        assert len(blob_store.blobs) == 1

    @pytest.mark.asyncio
    async def test_download_after_delete_is_denied(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        transfer = await _upload(service, users["alice"], b"payload")

        service.delete_transfer(transfer.transfer_id, users["alice"])

        with pytest.raises(AccessDeniedError):
            await service.download_transfer(transfer.transfer_id, users["alice"])
        # blobs are not retracted on delete
        assert len(blob_store.blobs) == 1


class TestOwnership:
    @pytest.mark.asyncio
    async def test_other_user_gets_same_error_as_unknown_id(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        transfer = await _upload(service, users["alice"], b"secret")

        with pytest.raises(AccessDeniedError) as foreign:
            service.get_transfer(transfer.transfer_id, users["bob"])
        with pytest.raises(AccessDeniedError) as unknown:
            service.get_transfer("no-such-transfer", users["bob"])

        assert str(foreign.value) == str(unknown.value)

    @pytest.mark.asyncio
    async def test_other_user_cannot_download_delete_or_fetch_blobs(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        transfer = await _upload(service, users["alice"], b"secret")

        with pytest.raises(AccessDeniedError):
            await service.download_transfer(transfer.transfer_id, users["bob"])
        with pytest.raises(AccessDeniedError):
            service.delete_transfer(transfer.transfer_id, users["bob"])
        with pytest.raises(AccessDeniedError):
            await service.fetch_blob(transfer.chunk_ids[0], users["bob"])

        assert service.get_transfer(transfer.transfer_id, users["alice"]) is not None

    @pytest.mark.asyncio
    async def test_listing_is_per_owner_and_most_recent_first(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        first = await _upload(service, users["alice"], b"one", "one.txt")
        second = await _upload(service, users["alice"], b"two", "two.txt")
        await _upload(service, users["bob"], b"three", "three.txt")

        listed = service.list_transfers(users["alice"])

        assert [t.transfer_id for t in listed] == [second.transfer_id, first.transfer_id]


class TestUploadValidation:
    @pytest.mark.asyncio
    async def test_empty_file(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        with pytest.raises(EmptyFileError):
            await _upload(service, users["alice"], b"")
        assert service.list_transfers(users["alice"]) == []

    @pytest.mark.asyncio
    async def test_missing_filename(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        with pytest.raises(InvalidInputError):
            await _upload(service, users["alice"], b"data", name=None)

    @pytest.mark.asyncio
    async def test_directory_components_are_stripped(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        transfer = await _upload(service, users["alice"], b"data", name="../../etc/passwd")
        assert transfer.original_name == "passwd"

    @pytest.mark.asyncio
    async def test_failed_chunk_writes_no_record(self, users):
        store = InMemoryBlobStore(fail_on_put=2)
        service = TransferService(blob_store=store, max_single_blob_size=10, chunk_size=4, upload_concurrency=1)

        with pytest.raises(BlobStoreUnavailableError):
            await _upload(service, users["alice"], os.urandom(12))

        assert service.list_transfers(users["alice"]) == []

    @pytest.mark.asyncio
    async def test_thumbnail_is_stored(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        thumbnail = base64.b64encode(b"\x89PNG tiny").decode()

        transfer = await _upload(service, users["alice"], b"data", "pic.png", thumbnail)

        assert service.get_transfer(transfer.transfer_id, users["alice"]).thumbnail == thumbnail

    @pytest.mark.asyncio
    async def test_invalid_thumbnail_is_rejected(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        with pytest.raises(InvalidInputError):
            await _upload(service, users["alice"], b"data", "pic.png", "not base64!!")
        assert blob_store.put_calls == 0


class TestDownloadFailures:
    @pytest.mark.asyncio
    async def test_missing_chunk(self, users):
        store = InMemoryBlobStore()
        service = TransferService(blob_store=store, max_single_blob_size=10, chunk_size=4)
        transfer = await _upload(service, users["alice"], os.urandom(12))
        del store.blobs[transfer.chunk_ids[1]]

        with pytest.raises(ChunkNotFoundError):
            await service.download_transfer(transfer.transfer_id, users["alice"])
        with pytest.raises(ChunkNotFoundError):
            await service.fetch_blob(transfer.chunk_ids[1], users["alice"])

    @pytest.mark.asyncio
    async def test_corrupted_chunk(self, users, blob_store):
        service = TransferService(blob_store=blob_store)
        transfer = await _upload(service, users["alice"], b"original")
        blob_store.blobs[transfer.chunk_ids[0]] = b"corrupted"

        with pytest.raises(ChecksumMismatchError):
            await service.download_transfer(transfer.transfer_id, users["alice"])

    @pytest.mark.asyncio
    async def test_fetch_blob_returns_chunk_bytes(self, users):
        store = InMemoryBlobStore()
        service = TransferService(blob_store=store, max_single_blob_size=10, chunk_size=4)
        data = os.urandom(12)
        transfer = await _upload(service, users["alice"], data)

        pieces = [await service.fetch_blob(blob_id, users["alice"]) for blob_id in transfer.chunk_ids]

        assert b"".join(pieces) == data
