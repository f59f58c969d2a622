"""Ownership checks and the share token state machine."""

import sqlite3
from datetime import timedelta
from typing import Callable, Optional

from common.logging_config import get_logger
from shareline.database import get_db_connection
from shareline.exceptions import InvalidInputError, NotFoundError, StorageFailureError
from shareline.repositories.file_repository import File, FileRepository
from shareline.utils import generate_share_token, utcnow

logger = get_logger(__name__)

NOT_FOUND_MESSAGE = "File not found or access denied"
SHARE_NOT_FOUND_MESSAGE = "Share link not found or expired"


def validate_expiration_days(expiration_days) -> Optional[int]:
    """
    Check an optional share lifetime.

    Returns:
        The number of days, or None for a share without expiry

    Raises:
        InvalidInputError: If a value was supplied that is not a positive integer
    """
    if expiration_days is None:
        return None
    if isinstance(expiration_days, bool) or not isinstance(expiration_days, int) or expiration_days <= 0:
        raise InvalidInputError("expirationDays must be a positive integer")
    return expiration_days


class AccessService:
    """
    Gates private operations by ownership and manages share tokens.

    Files are Private (no token), Shared (token, no or future expiry) or
    Expired (token with past expiry). Expiry is only evaluated when a token is
    resolved; expired tokens are never cleared automatically.
    """

    def __init__(self, clock: Callable = utcnow):
        self.file_repo = FileRepository()
        self.clock = clock

    def authorize_owner_access(self, file_id: int, user_id: int, conn=None) -> File:
        """
        Fetch a file on behalf of its owner.

        Raises:
            NotFoundError: If the file does not exist or belongs to someone else
            StorageFailureError: If the registry cannot be read
        """
        try:
            file = self.file_repo.get_by_id(file_id, conn=conn)
        except sqlite3.Error as e:
            raise StorageFailureError("Could not look up file") from e
        if file is None or file.owner_id != user_id:
            logger.debug(f"Owner access denied [file_id={file_id}] [user_id={user_id}]")
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return file

    def create_share_token(self, file_id: int, user_id: int, expiration_days: Optional[int] = None) -> str:
        """
        Issue a fresh share token for a file, replacing any previous one.

        Args:
            file_id: File to share
            user_id: Requesting user, must own the file
            expiration_days: Lifetime in days, or None for no expiry

        Returns:
            The new share token

        Raises:
            InvalidInputError: If expiration_days is supplied and not a positive integer
            NotFoundError: If the file does not exist or is not owned by user_id
            StorageFailureError: If the share state cannot be persisted
        """
        expiration_days = validate_expiration_days(expiration_days)

        with get_db_connection() as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
                file = self.authorize_owner_access(file_id, user_id, conn=conn)

                file.share_token = generate_share_token()
                if expiration_days is not None:
                    file.share_expires_at = self.clock() + timedelta(days=expiration_days)
                else:
                    file.share_expires_at = None

                self._save_share_state(file, conn)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageFailureError("Could not save share link") from e
            except Exception:
                conn.rollback()
                raise

        logger.info(
            f"Share link created [file_id={file_id}] [user_id={user_id}] "
            f"expires_at={file.share_expires_at.isoformat() if file.share_expires_at else 'never'}"
        )
        return file.share_token

    def revoke_share_token(self, file_id: int, user_id: int) -> None:
        """
        Return a file to the private state. Revoking a private file is a no-op.

        Raises:
            NotFoundError: If the file does not exist or is not owned by user_id
            StorageFailureError: If the share state cannot be persisted
        """
        with get_db_connection() as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
                file = self.authorize_owner_access(file_id, user_id, conn=conn)
                if file.share_token is None and file.share_expires_at is None:
                    conn.rollback()
                    logger.debug(f"File already private [file_id={file_id}]")
                    return

                file.share_token = None
                file.share_expires_at = None
                self._save_share_state(file, conn)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageFailureError("Could not revoke share link") from e
            except Exception:
                conn.rollback()
                raise

        logger.info(f"Share link revoked [file_id={file_id}] [user_id={user_id}]")

    def resolve_by_token(self, share_token: str) -> File:
        """
        Resolve an anonymous share token to its file.

        Raises:
            NotFoundError: If the token is unknown or its expiry has passed
            StorageFailureError: If the registry cannot be read
        """
        if not share_token:
            raise NotFoundError(SHARE_NOT_FOUND_MESSAGE)

        try:
            file = self.file_repo.find_by_share_token(share_token)
        except sqlite3.Error as e:
            raise StorageFailureError("Could not look up share link") from e

        if file is None or file.is_share_expired(self.clock()):
            raise NotFoundError(SHARE_NOT_FOUND_MESSAGE)
        return file

    def _save_share_state(self, file: File, conn) -> None:
        try:
            self.file_repo.save(file, conn=conn)
        except NotFoundError:
            # Row deleted after the ownership read.
            raise NotFoundError(NOT_FOUND_MESSAGE)
