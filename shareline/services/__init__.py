"""Service layer for business logic."""

from shareline.services.identity_service import IdentityService
from shareline.services.access_service import AccessService
from shareline.services.file_service import FileService

__all__ = [
    "IdentityService",
    "AccessService",
    "FileService",
]
