"""Committed file chunk repository for database operations."""

from dataclasses import dataclass
from typing import List, Tuple

from common.logging_config import get_logger
from gramstore.database import use_connection
from gramstore.utils import get_current_timestamp

logger = get_logger(__name__)


@dataclass
class FileChunk:
    id: int
    file_id: int
    chunk_index: int
    telegram_file_id: str
    size: int
    created_at: str


class ChunkRepository:
    @staticmethod
    def create_chunks(file_id: int, chunks: List[Tuple[int, str, int]], conn=None) -> List[FileChunk]:
        """
        Insert chunk rows for a file in ascending index order.

        Args:
            file_id: Owning file
            chunks: (chunk_index, telegram_file_id, size) triples
            conn: Optional connection to join the caller's transaction
        """
        if not chunks:
            return []

        created_at = get_current_timestamp()
        created = []

        try:
            with use_connection(conn) as c:
                cursor = c.cursor()
                for chunk_index, telegram_file_id, size in sorted(chunks, key=lambda item: item[0]):
                    cursor.execute(
                        """
                        INSERT INTO file_chunks (file_id, chunk_index, telegram_file_id, size, created_at)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        (file_id, chunk_index, telegram_file_id, size, created_at)
                    )
                    created.append(FileChunk(
                        id=cursor.lastrowid,
                        file_id=file_id,
                        chunk_index=chunk_index,
                        telegram_file_id=telegram_file_id,
                        size=size,
                        created_at=created_at,
                    ))
        except Exception as e:
            logger.error(f"Failed to create chunks for file_id={file_id}: {e}", exc_info=True)
            raise

        logger.debug(f"Created {len(created)} chunks for file_id={file_id}")
        return created

    @staticmethod
    def get_chunks_by_file(file_id: int, conn=None) -> List[FileChunk]:
        with use_connection(conn) as c:
            cursor = c.cursor()
            cursor.execute(
                """
                SELECT id, file_id, chunk_index, telegram_file_id, size, created_at
                FROM file_chunks
                WHERE file_id = ?
                ORDER BY chunk_index
                """,
                (file_id,)
            )
            rows = cursor.fetchall()

        return [
            FileChunk(
                id=row["id"],
                file_id=row["file_id"],
                chunk_index=row["chunk_index"],
                telegram_file_id=row["telegram_file_id"],
                size=row["size"],
                created_at=row["created_at"],
            )
            for row in rows
        ]

    @staticmethod
    def get_handles_by_folders(folder_ids: List[int]) -> List[str]:
        """
        Remote handles of every chunk of every file in the given folders.
        """
        if not folder_ids:
            return []

        placeholders = ','.join('?' for _ in folder_ids)
        with use_connection() as c:
            cursor = c.cursor()
            cursor.execute(
                f"""
                SELECT fc.telegram_file_id
                FROM file_chunks fc
                JOIN files f ON f.id = fc.file_id
                WHERE f.folder_id IN ({placeholders})
                """,
                folder_ids
            )
            return [row["telegram_file_id"] for row in cursor.fetchall()]

    @staticmethod
    def count_chunks(file_id: int) -> int:
        with use_connection() as c:
            cursor = c.cursor()
            cursor.execute("SELECT COUNT(*) AS n FROM file_chunks WHERE file_id = ?", (file_id,))
            return cursor.fetchone()["n"]
