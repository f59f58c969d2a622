"""Pydantic schemas for API requests and responses."""

from shareline.schemas.auth import CurrentUserResponse
from shareline.schemas.files import (
    FileUploadResponse,
    FileInfoResponse,
    ShareRequest,
    ShareResponse,
    SharedFileInfoResponse,
)
from shareline.schemas.common import ErrorResponse, MessageResponse

__all__ = [
    "CurrentUserResponse",
    "FileUploadResponse",
    "FileInfoResponse",
    "ShareRequest",
    "ShareResponse",
    "SharedFileInfoResponse",
    "ErrorResponse",
    "MessageResponse",
]
