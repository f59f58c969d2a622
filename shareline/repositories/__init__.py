"""Repository layer for data access."""

from shareline.repositories.user_repository import User, UserRepository
from shareline.repositories.file_repository import File, FileRepository

__all__ = [
    "User",
    "UserRepository",
    "File",
    "FileRepository",
]
