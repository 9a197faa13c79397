"""Transfer repository: the catalog of uploaded files and their ordered chunks."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

import sqlite3

from common.logging_config import get_logger
from common.types import ChunkDescriptor
from server.database import get_db_connection
from server.exceptions import RecordStoreError

logger = get_logger(__name__)


@dataclass
class Transfer:
    transfer_id: str
    owner_id: str
    original_name: str
    size: int
    created_at: datetime
    chunks: List[ChunkDescriptor] = field(default_factory=list)
    thumbnail: Optional[str] = None

    @property
    def chunk_ids(self) -> List[str]:
        return [chunk.blob_id for chunk in self.chunks]


class TransferRepository:
    """
    SQLite-backed record store.

    Every sqlite3 failure is re-raised as RecordStoreError so callers can
    tell a catalog failure apart from a blob store failure.
    """

    @staticmethod
    def save(transfer: Transfer) -> None:
        """
        Insert a transfer and its chunk rows in a single transaction.
        """
        if not transfer.chunks:
            raise ValueError(f"Transfer {transfer.transfer_id} has no chunks")

        logger.debug(
            f"Saving transfer {transfer.transfer_id} with {len(transfer.chunks)} chunks "
            f"[owner_id={transfer.owner_id}]"
        )
        try:
            with get_db_connection() as conn:
                try:
                    cursor = conn.cursor()
                    cursor.execute(
                        """
                        INSERT INTO transfers (transfer_id, owner_id, original_name, size, created_at, thumbnail)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (
                            transfer.transfer_id,
                            transfer.owner_id,
                            transfer.original_name,
                            transfer.size,
                            transfer.created_at.isoformat(),
                            transfer.thumbnail,
                        )
                    )
                    cursor.executemany(
                        """
                        INSERT INTO transfer_chunks (transfer_id, chunk_index, blob_id, size, checksum)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        [
                            (transfer.transfer_id, chunk.chunk_index, chunk.blob_id, chunk.size, chunk.checksum)
                            for chunk in transfer.chunks
                        ]
                    )
                    conn.commit()
                except Exception:
                    conn.rollback()
                    raise
        except sqlite3.Error as e:
            logger.error(f"Failed to save transfer {transfer.transfer_id}: {e}", exc_info=True)
            raise RecordStoreError(f"Failed to save transfer record: {e}") from e

        logger.info(f"Saved transfer {transfer.transfer_id} [owner_id={transfer.owner_id}]")

    @staticmethod
    def get_by_id(transfer_id: str) -> Optional[Transfer]:
        try:
            with get_db_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT transfer_id, owner_id, original_name, size, created_at, thumbnail
                    FROM transfers WHERE transfer_id = ?
                    """,
                    (transfer_id,)
                )
                row = cursor.fetchone()
                if row is None:
                    return None

                transfer = TransferRepository._row_to_transfer(row)
                transfer.chunks = TransferRepository._load_chunks(cursor, transfer_id)
                return transfer
        except sqlite3.Error as e:
            logger.error(f"Failed to load transfer {transfer_id}: {e}", exc_info=True)
            raise RecordStoreError(f"Failed to read transfer record: {e}") from e

    @staticmethod
    def list_by_owner(owner_id: str) -> List[Transfer]:
        """
        Transfers owned by owner_id, most recent first.
        """
        try:
            with get_db_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT transfer_id, owner_id, original_name, size, created_at, thumbnail
                    FROM transfers
                    WHERE owner_id = ?
                    ORDER BY created_at DESC, rowid DESC
                    """,
                    (owner_id,)
                )
                transfers = [TransferRepository._row_to_transfer(row) for row in cursor.fetchall()]
                for transfer in transfers:
                    transfer.chunks = TransferRepository._load_chunks(cursor, transfer.transfer_id)
                return transfers
        except sqlite3.Error as e:
            logger.error(f"Failed to list transfers [owner_id={owner_id}]: {e}", exc_info=True)
            raise RecordStoreError(f"Failed to list transfer records: {e}") from e

    @staticmethod
    def delete_by_id(transfer_id: str, owner_id: str) -> bool:
        """
        Delete a transfer record if owner_id owns it.

        Returns:
            True if a record was deleted, False if nothing matched
        """
        logger.debug(f"Deleting transfer [transfer_id={transfer_id}]")
        try:
            with get_db_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "DELETE FROM transfers WHERE transfer_id = ? AND owner_id = ?",
                    (transfer_id, owner_id)
                )
                deleted = cursor.rowcount > 0
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to delete transfer {transfer_id}: {e}", exc_info=True)
            raise RecordStoreError(f"Failed to delete transfer record: {e}") from e

        if deleted:
            logger.info(f"Transfer deleted [transfer_id={transfer_id}]")
        return deleted

    @staticmethod
    def owner_has_blob(owner_id: str, blob_id: str) -> bool:
        """
        Whether blob_id is a chunk of any transfer owned by owner_id.
        """
        try:
            with get_db_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT 1 FROM transfer_chunks c
                    JOIN transfers t ON t.transfer_id = c.transfer_id
                    WHERE c.blob_id = ? AND t.owner_id = ?
                    LIMIT 1
                    """,
                    (blob_id, owner_id)
                )
                return cursor.fetchone() is not None
        except sqlite3.Error as e:
            logger.error(f"Failed to check blob ownership: {e}", exc_info=True)
            raise RecordStoreError(f"Failed to read transfer records: {e}") from e

    @staticmethod
    def _row_to_transfer(row: sqlite3.Row) -> Transfer:
        return Transfer(
            transfer_id=row["transfer_id"],
            owner_id=row["owner_id"],
            original_name=row["original_name"],
            size=row["size"],
            created_at=datetime.fromisoformat(row["created_at"]),
            thumbnail=row["thumbnail"],
        )

    @staticmethod
    def _load_chunks(cursor: sqlite3.Cursor, transfer_id: str) -> List[ChunkDescriptor]:
        cursor.execute(
            """
            SELECT blob_id, chunk_index, size, checksum
            FROM transfer_chunks
            WHERE transfer_id = ?
            ORDER BY chunk_index
            """,
            (transfer_id,)
        )
        return [
            ChunkDescriptor(
                blob_id=row["blob_id"],
                chunk_index=row["chunk_index"],
                size=row["size"],
                checksum=row["checksum"],
            )
            for row in cursor.fetchall()
        ]
