"""Database schema and connection management for SQLite."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Optional

from shareline.config import DATABASE_PATH, DATABASE_TIMEOUT


def init_database() -> None:
    """
    Initialize database and create tables if they don't exist.
    """
    db_path = Path(DATABASE_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection() as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS users (
                user_id INTEGER PRIMARY KEY AUTOINCREMENT,
                external_id TEXT UNIQUE NOT NULL,
                name TEXT NOT NULL,
                email TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS files (
                file_id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id INTEGER NOT NULL,
                original_filename TEXT NOT NULL,
                storage_key TEXT UNIQUE NOT NULL,
                size INTEGER NOT NULL,
                mime_type TEXT NOT NULL,
                created_at TEXT NOT NULL,
                share_token TEXT,
                share_expires_at TEXT,
                CHECK (share_token IS NOT NULL OR share_expires_at IS NULL),
                FOREIGN KEY(owner_id) REFERENCES users(user_id)
            )
        """)

        cursor.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_files_share_token ON files(share_token)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_files_owner_created ON files(owner_id, created_at)
        """)

        conn.commit()


def connect() -> sqlite3.Connection:
    """
    Open a new database connection. The caller closes it.
    """
    conn = sqlite3.connect(DATABASE_PATH, timeout=DATABASE_TIMEOUT)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.
    """
    conn = connect()
    try:
        yield conn
    finally:
        conn.close()


def get_row_value(row: Optional[sqlite3.Row], key: str, default: Any = None) -> Any:
    """
    Read a column from a row, returning default for missing or NULL columns.
    """
    if row is None or key not in row.keys():
        return default
    value = row[key]
    return default if value is None else value
