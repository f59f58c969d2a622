"""User repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from shareline.database import connect, get_db_connection, get_row_value
from shareline.exceptions import ConflictError
from shareline.utils import from_iso, to_iso

logger = get_logger(__name__)

_USER_COLUMNS = "user_id, external_id, name, email, created_at, updated_at"


@dataclass
class User:
    user_id: int
    external_id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        user_id=row["user_id"],
        external_id=row["external_id"],
        name=get_row_value(row, "name", ""),
        email=get_row_value(row, "email", ""),
        created_at=from_iso(row["created_at"]),
        updated_at=from_iso(row["updated_at"]),
    )


class UserRepository:
    @staticmethod
    def create_user(external_id: str, name: str, email: str, created_at: datetime, conn=None) -> User:
        """
        Insert a new user.

        Raises:
            ConflictError: If a user with the same external id already exists
        """
        logger.debug(f"Creating user [external_id={external_id}]")

        should_close = conn is None
        if conn is None:
            conn = connect()

        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO users (external_id, name, email, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (external_id, name, email, to_iso(created_at), to_iso(created_at))
            )
            user_id = cursor.lastrowid
            if should_close:
                conn.commit()
            logger.info(f"User created [user_id={user_id}] [external_id={external_id}]")
        except sqlite3.IntegrityError as e:
            if should_close:
                conn.rollback()
            logger.info(f"User already exists [external_id={external_id}]")
            raise ConflictError(f"User with external id '{external_id}' already exists") from e
        finally:
            if should_close:
                conn.close()

        return User(
            user_id=user_id,
            external_id=external_id,
            name=name,
            email=email,
            created_at=created_at,
            updated_at=created_at,
        )

    @staticmethod
    def get_by_external_id(external_id: str, conn=None) -> Optional[User]:
        logger.debug(f"Fetching user by external id: {external_id}")
        if conn is not None:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE external_id = ?", (external_id,)
            ).fetchone()
        else:
            with get_db_connection() as conn:
                row = conn.execute(
                    f"SELECT {_USER_COLUMNS} FROM users WHERE external_id = ?", (external_id,)
                ).fetchone()

        if row is None:
            return None
        return _row_to_user(row)

    @staticmethod
    def get_by_user_id(user_id: int) -> Optional[User]:
        with get_db_connection() as conn:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = ?", (user_id,)
            ).fetchone()

        if row is None:
            logger.debug(f"User not found: {user_id}")
            return None
        return _row_to_user(row)

    @staticmethod
    def update_profile(user_id: int, name: str, email: str, updated_at: datetime, conn=None) -> None:
        logger.debug(f"Updating profile [user_id={user_id}]")

        should_close = conn is None
        if conn is None:
            conn = connect()

        try:
            conn.execute(
                "UPDATE users SET name = ?, email = ?, updated_at = ? WHERE user_id = ?",
                (name, email, to_iso(updated_at), user_id)
            )
            if should_close:
                conn.commit()
            logger.info(f"Profile updated [user_id={user_id}]")
        except Exception as e:
            logger.error(f"Failed to update profile [user_id={user_id}]: {e}", exc_info=True)
            raise
        finally:
            if should_close:
                conn.close()

    @staticmethod
    def count() -> int:
        with get_db_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
