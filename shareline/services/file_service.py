"""File service: upload, listing, retrieval and deletion."""

import sqlite3
from typing import BinaryIO, Callable, Iterator, List, Optional, Tuple

from common.logging_config import get_logger
from shareline.content_type import detect_content_type
from shareline.database import get_db_connection
from shareline.exceptions import StorageFailureError
from shareline.file_storage import FileStorage
from shareline.repositories.file_repository import File, FileRepository
from shareline.services.access_service import AccessService
from shareline.utils import utcnow

logger = get_logger(__name__)


class FileService:
    def __init__(
        self,
        storage: Optional[FileStorage] = None,
        access_service: Optional[AccessService] = None,
        clock: Callable = utcnow,
    ):
        self.storage = storage or FileStorage()
        self.access = access_service or AccessService(clock=clock)
        self.file_repo = FileRepository()
        self.clock = clock

    def upload_file(
        self,
        owner_id: int,
        original_filename: Optional[str],
        file_data: BinaryIO,
        content_type: Optional[str] = None,
    ) -> File:
        """
        Store uploaded content and register it.

        Bytes are written before the record so that a failed write never
        leaves a record without content. If the record cannot be saved the
        written bytes stay behind as an orphan.

        Raises:
            InvalidInputError: If the file name is empty or has an illegal extension
            StorageFailureError: If content or metadata cannot be persisted
        """
        storage_key = self.storage.store(owner_id, original_filename, file_data)
        size = self.storage.get_size(storage_key) or 0
        mime_type = detect_content_type(self.storage.resolve(storage_key), declared=content_type)

        file = File(
            file_id=None,
            owner_id=owner_id,
            original_filename=original_filename,
            storage_key=storage_key,
            size=size,
            mime_type=mime_type,
            created_at=self.clock(),
        )

        try:
            self.file_repo.save(file)
        except sqlite3.Error as e:
            logger.error(f"Upload registration failed, orphaned content at {storage_key}: {e}")
            raise StorageFailureError("Could not save file metadata") from e

        logger.info(
            f"Uploaded file [file_id={file.file_id}] [owner_id={owner_id}] "
            f"size={size} mime_type={mime_type}"
        )
        return file

    def list_files(self, owner_id: int) -> List[File]:
        files = self.file_repo.find_by_owner(owner_id)
        logger.debug(f"Listed {len(files)} files [owner_id={owner_id}]")
        return files

    def open_file(self, file_id: int, user_id: int) -> Tuple[File, Iterator[bytes]]:
        """
        Open an owned file for download or preview.

        Returns:
            The file record and an iterator over its content

        Raises:
            NotFoundError: If the file is missing, not owned, or its content is gone
        """
        file = self.access.authorize_owner_access(file_id, user_id)
        return file, self.storage.read_streaming(file.storage_key)

    def get_shared_file(self, share_token: str) -> File:
        return self.access.resolve_by_token(share_token)

    def open_shared_file(self, share_token: str) -> Tuple[File, Iterator[bytes]]:
        """
        Open a file through a share token.

        Raises:
            NotFoundError: If the token is unknown or expired, or the content is gone
        """
        file = self.access.resolve_by_token(share_token)
        logger.info(f"Serving shared file [file_id={file.file_id}]")
        return file, self.storage.read_streaming(file.storage_key)

    def delete_file(self, file_id: int, user_id: int) -> None:
        """
        Delete a file's content and then its record.

        If the content cannot be removed the record is kept so the deletion
        can be retried.

        Raises:
            NotFoundError: If the file does not exist or is not owned by user_id
            StorageFailureError: If the content or the record cannot be removed
        """
        with get_db_connection() as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
                file = self.access.authorize_owner_access(file_id, user_id, conn=conn)
                self.storage.delete(file.storage_key)
                self.file_repo.delete(file, conn=conn)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageFailureError("Could not delete file metadata") from e
            except Exception:
                conn.rollback()
                raise

        logger.info(f"Deleted file [file_id={file_id}] [user_id={user_id}]")
