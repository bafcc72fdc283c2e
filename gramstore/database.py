"""Database schema and connection management for SQLite."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from common.constants import ROOT_FOLDER_ID, ROOT_FOLDER_NAME
from gramstore.config import DATABASE_PATH
from gramstore.utils import get_current_timestamp


def init_database() -> None:
    """
    Initialize database, create tables if they don't exist and seed the root folder.
    """
    db_path = Path(DATABASE_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection() as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS folders (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                parent_id INTEGER,
                created_at TEXT NOT NULL,
                FOREIGN KEY(parent_id) REFERENCES folders(id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS files (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                folder_id INTEGER,
                size INTEGER NOT NULL,
                mime_type TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY(folder_id) REFERENCES folders(id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS file_chunks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                file_id INTEGER NOT NULL,
                chunk_index INTEGER NOT NULL,
                telegram_file_id TEXT NOT NULL,
                size INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                UNIQUE(file_id, chunk_index),
                FOREIGN KEY(file_id) REFERENCES files(id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS temp_chunks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                upload_id TEXT NOT NULL,
                chunk_index INTEGER NOT NULL,
                telegram_file_id TEXT NOT NULL,
                size INTEGER NOT NULL,
                original_file_name TEXT NOT NULL,
                original_file_size INTEGER NOT NULL,
                folder_id INTEGER,
                created_at TEXT NOT NULL,
                UNIQUE(upload_id, chunk_index)
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_folders_parent_id ON folders(parent_id)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_files_folder_id ON files(folder_id)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_file_chunks_file_id ON file_chunks(file_id)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_temp_chunks_upload_id ON temp_chunks(upload_id)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_temp_chunks_created_at ON temp_chunks(created_at)
        """)

        cursor.execute(
            """
            INSERT OR IGNORE INTO folders (id, name, parent_id, created_at)
            VALUES (?, ?, NULL, ?)
            """,
            (ROOT_FOLDER_ID, ROOT_FOLDER_NAME, get_current_timestamp())
        )

        conn.commit()


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.

    Foreign keys are enabled per connection so file and folder deletes cascade.
    """
    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def use_connection(conn: Optional[sqlite3.Connection] = None) -> Generator[sqlite3.Connection, None, None]:
    """
    Reuse a caller's connection or open a short-lived one.

    A borrowed connection is left for the caller to commit; an owned one is
    committed on success, rolled back on error and closed either way.
    """
    if conn is not None:
        yield conn
        return

    with get_db_connection() as owned:
        try:
            yield owned
            owned.commit()
        except Exception:
            owned.rollback()
            raise
