"""Folder repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.constants import ROOT_FOLDER_ID
from common.logging_config import get_logger
from gramstore.database import use_connection
from gramstore.utils import get_current_timestamp, parse_timestamp

logger = get_logger(__name__)


@dataclass
class Folder:
    id: int
    name: str
    parent_id: Optional[int]
    created_at: datetime

    @property
    def is_root(self) -> bool:
        return self.id == ROOT_FOLDER_ID


def _row_to_folder(row: sqlite3.Row) -> Folder:
    return Folder(
        id=row["id"],
        name=row["name"],
        parent_id=row["parent_id"],
        created_at=parse_timestamp(row["created_at"]),
    )


class FolderRepository:
    @staticmethod
    def create_folder(name: str, parent_id: int, conn=None) -> Folder:
        created_at = get_current_timestamp()
        with use_connection(conn) as c:
            cursor = c.cursor()
            cursor.execute(
                "INSERT INTO folders (name, parent_id, created_at) VALUES (?, ?, ?)",
                (name, parent_id, created_at)
            )
            folder_id = cursor.lastrowid

        logger.info(f"Created folder {folder_id} '{name}' under {parent_id}")
        return Folder(
            id=folder_id,
            name=name,
            parent_id=parent_id,
            created_at=parse_timestamp(created_at),
        )

    @staticmethod
    def get_by_id(folder_id: int, conn=None) -> Optional[Folder]:
        with use_connection(conn) as c:
            cursor = c.cursor()
            cursor.execute(
                "SELECT id, name, parent_id, created_at FROM folders WHERE id = ?",
                (folder_id,)
            )
            row = cursor.fetchone()

        return _row_to_folder(row) if row else None

    @staticmethod
    def list_by_parent(parent_id: int) -> List[Folder]:
        with use_connection() as c:
            cursor = c.cursor()
            cursor.execute(
                """
                SELECT id, name, parent_id, created_at
                FROM folders
                WHERE parent_id = ?
                ORDER BY name
                """,
                (parent_id,)
            )
            rows = cursor.fetchall()

        return [_row_to_folder(row) for row in rows]

    @staticmethod
    def rename_folder(folder_id: int, name: str) -> bool:
        with use_connection() as c:
            cursor = c.cursor()
            cursor.execute("UPDATE folders SET name = ? WHERE id = ?", (name, folder_id))
            updated = cursor.rowcount > 0

        if updated:
            logger.info(f"Renamed folder {folder_id} to '{name}'")
        return updated

    @staticmethod
    def delete_folder(folder_id: int, conn=None) -> bool:
        """
        Delete a folder; subfolders, files and file chunks cascade.
        """
        with use_connection(conn) as c:
            cursor = c.cursor()
            cursor.execute("DELETE FROM folders WHERE id = ?", (folder_id,))
            deleted = cursor.rowcount > 0

        logger.info(f"Deleted folder {folder_id} [deleted={deleted}]")
        return deleted

    @staticmethod
    def get_subtree_ids(folder_id: int) -> List[int]:
        """
        Ids of a folder and all of its descendants.
        """
        with use_connection() as c:
            cursor = c.cursor()
            cursor.execute(
                """
                WITH RECURSIVE subtree(id) AS (
                    SELECT id FROM folders WHERE id = ?
                    UNION ALL
                    SELECT f.id FROM folders f JOIN subtree s ON f.parent_id = s.id
                )
                SELECT id FROM subtree
                """,
                (folder_id,)
            )
            return [row["id"] for row in cursor.fetchall()]

    @staticmethod
    def get_path(folder_id: int) -> List[Folder]:
        """
        Folders from the root down to `folder_id`, inclusive.
        """
        path = []
        seen = set()
        current = FolderRepository.get_by_id(folder_id)
        while current is not None and current.id not in seen:
            path.append(current)
            seen.add(current.id)
            if current.parent_id is None:
                break
            current = FolderRepository.get_by_id(current.parent_id)

        path.reverse()
        return path
