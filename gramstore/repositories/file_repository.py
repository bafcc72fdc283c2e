"""File repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from gramstore.database import use_connection
from gramstore.utils import get_current_timestamp, parse_timestamp

logger = get_logger(__name__)


@dataclass
class File:
    id: int
    name: str
    folder_id: Optional[int]
    size: int
    mime_type: Optional[str]
    created_at: datetime
    updated_at: datetime


_FILE_COLUMNS = "id, name, folder_id, size, mime_type, created_at, updated_at"


def _row_to_file(row: sqlite3.Row) -> File:
    return File(
        id=row["id"],
        name=row["name"],
        folder_id=row["folder_id"],
        size=row["size"],
        mime_type=row["mime_type"],
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


class FileRepository:
    @staticmethod
    def create_file(
        name: str,
        folder_id: Optional[int],
        size: int,
        mime_type: Optional[str],
        conn=None
    ) -> File:
        now = get_current_timestamp()
        with use_connection(conn) as c:
            cursor = c.cursor()
            cursor.execute(
                """
                INSERT INTO files (name, folder_id, size, mime_type, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (name, folder_id, size, mime_type, now, now)
            )
            file_id = cursor.lastrowid

        logger.debug(f"Created file row {file_id} '{name}' ({size} bytes)")
        return File(
            id=file_id,
            name=name,
            folder_id=folder_id,
            size=size,
            mime_type=mime_type,
            created_at=parse_timestamp(now),
            updated_at=parse_timestamp(now),
        )

    @staticmethod
    def get_by_id(file_id: int, conn=None) -> Optional[File]:
        with use_connection(conn) as c:
            cursor = c.cursor()
            cursor.execute(f"SELECT {_FILE_COLUMNS} FROM files WHERE id = ?", (file_id,))
            row = cursor.fetchone()

        return _row_to_file(row) if row else None

    @staticmethod
    def list_by_folder(folder_id: int) -> List[File]:
        with use_connection() as c:
            cursor = c.cursor()
            cursor.execute(
                f"SELECT {_FILE_COLUMNS} FROM files WHERE folder_id = ? ORDER BY name",
                (folder_id,)
            )
            rows = cursor.fetchall()

        return [_row_to_file(row) for row in rows]

    @staticmethod
    def rename_file(file_id: int, name: str) -> Optional[File]:
        with use_connection() as c:
            cursor = c.cursor()
            cursor.execute(
                "UPDATE files SET name = ?, updated_at = ? WHERE id = ?",
                (name, get_current_timestamp(), file_id)
            )
            if cursor.rowcount == 0:
                return None
            logger.info(f"Renamed file {file_id} to '{name}'")
            return FileRepository.get_by_id(file_id, conn=c)

    @staticmethod
    def delete_file(file_id: int, conn=None) -> bool:
        """
        Delete a file row; its chunk rows cascade.
        """
        logger.debug(f"Deleting file [file_id={file_id}]")
        try:
            with use_connection(conn) as c:
                cursor = c.cursor()
                cursor.execute("DELETE FROM files WHERE id = ?", (file_id,))
                deleted = cursor.rowcount > 0
        except Exception as e:
            logger.error(f"Failed to delete file [file_id={file_id}]: {e}", exc_info=True)
            raise

        logger.info(f"File deleted [file_id={file_id}] [deleted={deleted}]")
        return deleted
