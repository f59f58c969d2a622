"""Places uploaded content on disk under per-owner directories and reads it back."""

import os
import shutil
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from common.constants import STREAM_PIECE_SIZE
from common.logging_config import get_logger
from shareline import config
from shareline.exceptions import InvalidInputError, NotFoundError, StorageFailureError
from shareline.utils import generate_uuid

logger = get_logger(__name__)

_SEPARATORS = {"/", "\\", "\x00"} | {sep for sep in (os.sep, os.altsep) if sep}

CREATE_ATTEMPTS = 3


def extract_extension(original_name: str) -> str:
    """
    Get the extension of a client-supplied file name.

    Args:
        original_name: Name as declared by the client

    Returns:
        Characters after the last '.', or '' when there is none. A dot at
        position 0 (e.g. '.bashrc') does not start an extension.

    Raises:
        InvalidInputError: If the extension contains a path separator
    """
    last_dot = original_name.rfind(".")
    if last_dot <= 0:
        return ""

    extension = original_name[last_dot + 1:]
    if any(sep in extension for sep in _SEPARATORS):
        raise InvalidInputError("File extension contains illegal characters")
    return extension


class FileStorage:
    """
    Content area addressed by storage keys of the form ``ownerId/generatedName``.
    Original file names are never used to address content.
    """

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self.root = Path(root if root is not None else config.UPLOAD_DIR).resolve()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageFailureError(f"Could not create upload directory {self.root}") from e

    def store(self, owner_id: Union[int, str], original_name: Optional[str], stream: BinaryIO) -> str:
        """
        Write uploaded bytes under the owner's directory.

        Args:
            owner_id: Internal id of the owning user
            original_name: Client-declared file name, only used for its extension
            stream: Readable binary stream with the content

        Returns:
            Storage key ``ownerId/generatedName``

        Raises:
            InvalidInputError: If the name is empty or its extension is illegal
            StorageFailureError: If the write fails
        """
        if not original_name:
            raise InvalidInputError("Filename cannot be empty")

        extension = extract_extension(original_name)
        generated_name = generate_uuid() + (f".{extension}" if extension else "")
        owner_dir = self.root / str(owner_id)
        target = owner_dir / generated_name

        out = self._create_exclusive(owner_dir, target)
        try:
            with out:
                shutil.copyfileobj(stream, out, STREAM_PIECE_SIZE)
        except OSError as e:
            logger.error(f"Failed to store upload for owner {owner_id}: {e}", exc_info=True)
            target.unlink(missing_ok=True)
            raise StorageFailureError("Could not store file") from e

        storage_key = f"{owner_id}/{generated_name}"
        logger.debug(f"Stored content at {storage_key}")
        return storage_key

    def _create_exclusive(self, owner_dir: Path, target: Path) -> BinaryIO:
        """
        Create the owner directory if needed and open a new file in it.

        A concurrent delete may remove the owner directory once it is empty,
        so creation is retried a bounded number of times.
        """
        for attempt in range(1, CREATE_ATTEMPTS + 1):
            try:
                owner_dir.mkdir(parents=True, exist_ok=True)
                return open(target, "xb")
            except FileNotFoundError as e:
                if attempt == CREATE_ATTEMPTS:
                    logger.error(f"Owner directory {owner_dir.name} kept disappearing: {e}")
                    raise StorageFailureError("Could not store file") from e
                logger.debug(f"Owner directory {owner_dir.name} removed concurrently, retrying")
            except OSError as e:
                logger.error(f"Failed to create {target.name} for owner {owner_dir.name}: {e}", exc_info=True)
                raise StorageFailureError("Could not store file") from e

    def resolve(self, storage_key: str) -> Path:
        """
        Resolve a storage key to a normalized path inside the storage root.

        Raises:
            InvalidInputError: If the key is empty or escapes the storage root
        """
        if not storage_key or "\x00" in storage_key:
            raise InvalidInputError("Invalid storage key")

        path = (self.root / storage_key).resolve()
        if path == self.root or not path.is_relative_to(self.root):
            logger.warning("Rejected storage key resolving outside the storage root")
            raise InvalidInputError("Invalid storage key")
        return path

    def load(self, storage_key: str) -> BinaryIO:
        """
        Open stored content for reading. The caller closes the handle.

        Raises:
            InvalidInputError: If the key escapes the storage root
            NotFoundError: If no content exists for the key
            StorageFailureError: If the content cannot be opened
        """
        path = self.resolve(storage_key)
        try:
            return open(path, "rb")
        except (FileNotFoundError, IsADirectoryError) as e:
            raise NotFoundError("File not found or not readable") from e
        except OSError as e:
            raise StorageFailureError("Could not read file") from e

    def read_streaming(self, storage_key: str, piece_size: int = STREAM_PIECE_SIZE) -> Iterator[bytes]:
        """
        Stream stored content in pieces.

        The handle is opened before the first piece is requested so that a
        missing file is reported before any response is started.
        """
        handle = self.load(storage_key)

        def pieces() -> Iterator[bytes]:
            with handle:
                while True:
                    piece = handle.read(piece_size)
                    if not piece:
                        break
                    yield piece

        return pieces()

    def delete(self, storage_key: str) -> bool:
        """
        Delete stored content. Deleting absent content is not an error.

        After removal the owner directory is removed if it became empty;
        failure to do so is ignored.

        Returns:
            True if content was deleted, False if it did not exist

        Raises:
            StorageFailureError: If the content exists but cannot be removed
        """
        path = self.resolve(storage_key)
        try:
            path.unlink()
            deleted = True
        except FileNotFoundError:
            deleted = False
        except OSError as e:
            logger.error(f"Failed to delete {storage_key}: {e}", exc_info=True)
            raise StorageFailureError("Could not delete file") from e

        owner_dir = path.parent
        if owner_dir != self.root:
            try:
                owner_dir.rmdir()
            except OSError:
                pass

        return deleted

    def exists(self, storage_key: str) -> bool:
        try:
            return self.resolve(storage_key).is_file()
        except InvalidInputError:
            return False

    def get_size(self, storage_key: str) -> Optional[int]:
        """
        Get size of stored content in bytes, or None if it doesn't exist.
        """
        path = self.resolve(storage_key)
        try:
            return path.stat().st_size
        except FileNotFoundError:
            return None
