"""Pydantic schemas for file and share endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes snake_case fields as camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileUploadResponse(CamelModel):
    """Response model for file upload."""
    id: int
    original_filename: str
    file_size: int
    message: str = "File uploaded successfully"


class FileInfoResponse(CamelModel):
    """Metadata for one owned file. The storage key is never exposed."""
    id: int
    original_filename: str
    file_size: int
    mime_type: str
    share_token: Optional[str] = None
    share_expires_at: Optional[datetime] = None
    created_at: datetime
    shareable: bool


class ShareRequest(CamelModel):
    """
    Request model for share link creation.

    expirationDays is taken as sent and checked by the share service, so that
    booleans, strings and fractions are refused like any other invalid lifetime.
    """
    expiration_days: Any = None


class ShareResponse(CamelModel):
    """Response model for share link creation."""
    share_token: str
    share_url: str


class SharedFileInfoResponse(CamelModel):
    """Public view of a shared file. Deliberately omits the owner."""
    original_filename: str
    file_size: int
    mime_type: str
    created_at: datetime
    share_expires_at: Optional[datetime] = None
