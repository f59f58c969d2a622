"""File registry: metadata records for stored objects."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from shareline.database import connect, get_db_connection
from shareline.exceptions import NotFoundError
from shareline.utils import from_iso, to_iso

logger = get_logger(__name__)

_FILE_COLUMNS = (
    "file_id, owner_id, original_filename, storage_key, size, mime_type, "
    "created_at, share_token, share_expires_at"
)


@dataclass
class File:
    file_id: Optional[int]
    owner_id: int
    original_filename: str
    storage_key: str
    size: int
    mime_type: str
    created_at: datetime
    share_token: Optional[str] = None
    share_expires_at: Optional[datetime] = None

    @property
    def is_shared(self) -> bool:
        return self.share_token is not None

    def is_share_expired(self, now: datetime) -> bool:
        return self.share_expires_at is not None and self.share_expires_at < now


def _row_to_file(row: sqlite3.Row) -> File:
    return File(
        file_id=row["file_id"],
        owner_id=row["owner_id"],
        original_filename=row["original_filename"],
        storage_key=row["storage_key"],
        size=row["size"],
        mime_type=row["mime_type"],
        created_at=from_iso(row["created_at"]),
        share_token=row["share_token"],
        share_expires_at=from_iso(row["share_expires_at"]),
    )


class FileRepository:
    @staticmethod
    def save(file: File, conn=None) -> File:
        """
        Insert a new file record, or update an existing one when file_id is set.

        Args:
            file: Record to persist
            conn: Optional open connection; the caller commits when provided

        Returns:
            The persisted record with file_id assigned
        """
        should_close = conn is None
        if conn is None:
            conn = connect()

        try:
            cursor = conn.cursor()
            if file.file_id is None:
                cursor.execute(
                    """
                    INSERT INTO files (owner_id, original_filename, storage_key, size, mime_type,
                                       created_at, share_token, share_expires_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (file.owner_id, file.original_filename, file.storage_key, file.size,
                     file.mime_type, to_iso(file.created_at), file.share_token,
                     to_iso(file.share_expires_at))
                )
                file.file_id = cursor.lastrowid
                logger.debug(f"Inserted file record [file_id={file.file_id}]")
            else:
                cursor.execute(
                    """
                    UPDATE files
                    SET original_filename = ?, size = ?, mime_type = ?,
                        share_token = ?, share_expires_at = ?
                    WHERE file_id = ?
                    """,
                    (file.original_filename, file.size, file.mime_type, file.share_token,
                     to_iso(file.share_expires_at), file.file_id)
                )
                if cursor.rowcount == 0:
                    raise NotFoundError(f"File record {file.file_id} no longer exists")
                logger.debug(f"Updated file record [file_id={file.file_id}]")

            if should_close:
                conn.commit()
            return file
        except Exception as e:
            logger.error(f"Failed to save file record [file_id={file.file_id}]: {e}", exc_info=True)
            raise
        finally:
            if should_close:
                conn.close()

    @staticmethod
    def get_by_id(file_id: int, conn=None) -> Optional[File]:
        query = f"SELECT {_FILE_COLUMNS} FROM files WHERE file_id = ?"
        if conn is not None:
            row = conn.execute(query, (file_id,)).fetchone()
        else:
            with get_db_connection() as conn:
                row = conn.execute(query, (file_id,)).fetchone()

        return _row_to_file(row) if row is not None else None

    @staticmethod
    def find_by_owner(owner_id: int) -> List[File]:
        """
        List files owned by a user, newest first.
        """
        with get_db_connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_FILE_COLUMNS} FROM files
                WHERE owner_id = ?
                ORDER BY created_at DESC, file_id DESC
                """,
                (owner_id,)
            ).fetchall()

        return [_row_to_file(row) for row in rows]

    @staticmethod
    def find_by_share_token(share_token: str, conn=None) -> Optional[File]:
        query = f"SELECT {_FILE_COLUMNS} FROM files WHERE share_token = ?"
        if conn is not None:
            row = conn.execute(query, (share_token,)).fetchone()
        else:
            with get_db_connection() as conn:
                row = conn.execute(query, (share_token,)).fetchone()

        return _row_to_file(row) if row is not None else None

    @staticmethod
    def delete(file: File, conn=None) -> None:
        logger.debug(f"Deleting file record [file_id={file.file_id}]")
        should_close = conn is None
        if conn is None:
            conn = connect()

        try:
            conn.execute("DELETE FROM files WHERE file_id = ?", (file.file_id,))
            if should_close:
                conn.commit()
            logger.info(f"File record deleted [file_id={file.file_id}]")
        except Exception as e:
            logger.error(f"Failed to delete file record [file_id={file.file_id}]: {e}", exc_info=True)
            raise
        finally:
            if should_close:
                conn.close()
