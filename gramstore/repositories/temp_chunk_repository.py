"""Staged (uncommitted) chunk repository for resumable uploads."""

import sqlite3
from dataclasses import dataclass
from typing import List, Optional, Tuple

from common.logging_config import get_logger
from gramstore.database import use_connection
from gramstore.utils import get_current_timestamp

logger = get_logger(__name__)


@dataclass
class TempChunk:
    id: int
    upload_id: str
    chunk_index: int
    telegram_file_id: str
    size: int
    original_file_name: str
    original_file_size: int
    folder_id: Optional[int]
    created_at: str


_TEMP_COLUMNS = (
    "id, upload_id, chunk_index, telegram_file_id, size, "
    "original_file_name, original_file_size, folder_id, created_at"
)


def _row_to_temp_chunk(row: sqlite3.Row) -> TempChunk:
    return TempChunk(
        id=row["id"],
        upload_id=row["upload_id"],
        chunk_index=row["chunk_index"],
        telegram_file_id=row["telegram_file_id"],
        size=row["size"],
        original_file_name=row["original_file_name"],
        original_file_size=row["original_file_size"],
        folder_id=row["folder_id"],
        created_at=row["created_at"],
    )


class TempChunkRepository:
    @staticmethod
    def upsert_chunk(
        upload_id: str,
        chunk_index: int,
        telegram_file_id: str,
        size: int,
        original_file_name: str,
        original_file_size: int,
        folder_id: Optional[int],
        conn=None
    ) -> Tuple[TempChunk, Optional[str]]:
        """
        Stage one chunk, replacing any earlier row for the same (upload_id, chunk_index).

        Returns:
            The stored row and the remote handle it superseded, if any
        """
        created_at = get_current_timestamp()
        with use_connection(conn) as c:
            cursor = c.cursor()
            cursor.execute(
                "SELECT telegram_file_id FROM temp_chunks WHERE upload_id = ? AND chunk_index = ?",
                (upload_id, chunk_index)
            )
            existing = cursor.fetchone()
            previous_handle = existing["telegram_file_id"] if existing else None

            cursor.execute(
                """
                INSERT INTO temp_chunks
                (upload_id, chunk_index, telegram_file_id, size,
                 original_file_name, original_file_size, folder_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(upload_id, chunk_index) DO UPDATE SET
                    telegram_file_id = excluded.telegram_file_id,
                    size = excluded.size,
                    original_file_name = excluded.original_file_name,
                    original_file_size = excluded.original_file_size,
                    folder_id = excluded.folder_id,
                    created_at = excluded.created_at
                """,
                (upload_id, chunk_index, telegram_file_id, size,
                 original_file_name, original_file_size, folder_id, created_at)
            )

            cursor.execute(
                f"SELECT {_TEMP_COLUMNS} FROM temp_chunks WHERE upload_id = ? AND chunk_index = ?",
                (upload_id, chunk_index)
            )
            row = cursor.fetchone()

        if previous_handle is not None:
            logger.info(f"Replaced staged chunk {chunk_index} [upload_id={upload_id}]")
        return _row_to_temp_chunk(row), previous_handle

    @staticmethod
    def get_by_upload(upload_id: str, conn=None) -> List[TempChunk]:
        with use_connection(conn) as c:
            cursor = c.cursor()
            cursor.execute(
                f"""
                SELECT {_TEMP_COLUMNS}
                FROM temp_chunks
                WHERE upload_id = ?
                ORDER BY chunk_index
                """,
                (upload_id,)
            )
            rows = cursor.fetchall()

        return [_row_to_temp_chunk(row) for row in rows]

    @staticmethod
    def delete_by_upload(upload_id: str, conn=None) -> int:
        with use_connection(conn) as c:
            cursor = c.cursor()
            cursor.execute("DELETE FROM temp_chunks WHERE upload_id = ?", (upload_id,))
            deleted = cursor.rowcount

        logger.debug(f"Deleted {deleted} staged chunks [upload_id={upload_id}]")
        return deleted

    @staticmethod
    def find_stale_uploads(cutoff: str) -> List[str]:
        """
        Upload ids whose most recent staged chunk is older than `cutoff`.

        Args:
            cutoff: ISO timestamp in the stored format
        """
        with use_connection() as c:
            cursor = c.cursor()
            cursor.execute(
                """
                SELECT upload_id
                FROM temp_chunks
                GROUP BY upload_id
                HAVING MAX(created_at) < ?
                ORDER BY MIN(created_at)
                """,
                (cutoff,)
            )
            return [row["upload_id"] for row in cursor.fetchall()]
