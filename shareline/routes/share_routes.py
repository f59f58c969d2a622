"""Share link API routes."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Request

from shareline import config
from shareline.auth import get_current_user
from shareline.repositories.user_repository import User
from shareline.routes.file_routes import file_response
from shareline.schemas.common import MessageResponse
from shareline.schemas.files import SharedFileInfoResponse, ShareRequest, ShareResponse
from shareline.services.access_service import AccessService
from shareline.services.file_service import FileService

router = APIRouter(prefix="/api", tags=["Sharing"])


def resolve_base_url(request: Request) -> str:
    """
    Work out the public base URL for share links.

    Forwarded headers from a proxy take precedence, then the request's own
    base URL, then the configured BASE_URL.
    """
    forwarded_host = (request.headers.get("X-Forwarded-Host") or "").strip()
    if forwarded_host:
        scheme = (request.headers.get("X-Forwarded-Proto") or "").strip() or request.url.scheme
        forwarded_port = (request.headers.get("X-Forwarded-Port") or "").strip()
        port = ""
        if forwarded_port and forwarded_port not in ("80", "443"):
            port = f":{forwarded_port}"
        return f"{scheme}://{forwarded_host}{port}"

    base = str(request.base_url).rstrip("/")
    return base or config.BASE_URL.rstrip("/")


@router.post("/files/{file_id}/share", response_model=ShareResponse)
async def create_share_link(
    file_id: int,
    request: Request,
    share_request: Optional[ShareRequest] = Body(None),
    current_user: User = Depends(get_current_user)
):
    """
    Create (or replace) the share link of an owned file.

    Parameters:
        - expirationDays: Optional positive number of days the link stays valid

    Returns:
        - shareToken, shareUrl

    Raises:
        - 400: Non-positive expirationDays
        - 401: No verified identity
        - 404: File not found or not owned by the caller
    """
    expiration_days = share_request.expiration_days if share_request is not None else None
    share_token = AccessService().create_share_token(file_id, current_user.user_id, expiration_days)

    return ShareResponse(
        share_token=share_token,
        share_url=f"{resolve_base_url(request)}/share/{share_token}",
    )


@router.delete("/files/{file_id}/share", response_model=MessageResponse)
async def revoke_share_link(file_id: int, current_user: User = Depends(get_current_user)):
    """
    Revoke the share link of an owned file.
    """
    AccessService().revoke_share_token(file_id, current_user.user_id)
    return MessageResponse(message="Share link revoked successfully")


@router.get("/share/{token}")
async def download_shared_file(token: str):
    """
    Download a shared file. No identity is required.

    Raises:
        - 404: Unknown, revoked or expired share token
    """
    file, content = FileService().open_shared_file(token)
    return file_response(file, content, "attachment")


@router.get("/share/{token}/info", response_model=SharedFileInfoResponse)
async def shared_file_info(token: str):
    """
    Public metadata of a shared file.
    """
    file = FileService().get_shared_file(token)
    return SharedFileInfoResponse(
        original_filename=file.original_filename,
        file_size=file.size,
        mime_type=file.mime_type,
        created_at=file.created_at,
        share_expires_at=file.share_expires_at,
    )
