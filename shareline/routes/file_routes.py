"""File operation API routes."""

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import StreamingResponse

from shareline.auth import get_current_user
from shareline.repositories.file_repository import File as StoredFile
from shareline.repositories.user_repository import User
from shareline.schemas.common import MessageResponse
from shareline.schemas.files import FileInfoResponse, FileUploadResponse
from shareline.services.file_service import FileService

router = APIRouter(prefix="/api/files", tags=["Files"])


def content_disposition(disposition: str, filename: str) -> str:
    """
    Build a Content-Disposition header value carrying the original file name.
    """
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'").replace("\\", "_")
    return f"{disposition}; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def file_response(file: StoredFile, content, disposition: str) -> StreamingResponse:
    return StreamingResponse(
        content,
        media_type=file.mime_type,
        headers={
            "Content-Disposition": content_disposition(disposition, file.original_filename),
        },
    )


def to_file_info(file: StoredFile) -> FileInfoResponse:
    return FileInfoResponse(
        id=file.file_id,
        original_filename=file.original_filename,
        file_size=file.size,
        mime_type=file.mime_type,
        share_token=file.share_token,
        share_expires_at=file.share_expires_at,
        created_at=file.created_at,
        shareable=file.is_shared,
    )


@router.post("/upload", response_model=FileUploadResponse)
async def upload_file(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user)
):
    """
    Upload a file.

    Parameters:
        - file: File to upload (multipart/form-data)

    Returns:
        - id, originalFilename, fileSize of the stored file

    Raises:
        - 400: Empty file name or illegal extension
        - 401: No verified identity
        - 500: Storage failure
    """
    file_service = FileService()

    stored = file_service.upload_file(
        owner_id=current_user.user_id,
        original_filename=file.filename,
        file_data=file.file,
        content_type=file.content_type,
    )

    return FileUploadResponse(
        id=stored.file_id,
        original_filename=stored.original_filename,
        file_size=stored.size,
    )


@router.get("", response_model=list[FileInfoResponse])
async def list_files(current_user: User = Depends(get_current_user)):
    """
    List the caller's files, newest first.
    """
    file_service = FileService()
    return [to_file_info(file) for file in file_service.list_files(current_user.user_id)]


@router.get("/{file_id}")
async def download_file(file_id: int, current_user: User = Depends(get_current_user)):
    """
    Download an owned file as an attachment.

    Raises:
        - 401: No verified identity
        - 404: File not found or not owned by the caller
    """
    file_service = FileService()
    file, content = file_service.open_file(file_id, current_user.user_id)
    return file_response(file, content, "attachment")


@router.get("/{file_id}/preview")
async def preview_file(file_id: int, current_user: User = Depends(get_current_user)):
    """
    Serve an owned file inline.
    """
    file_service = FileService()
    file, content = file_service.open_file(file_id, current_user.user_id)
    return file_response(file, content, "inline")


@router.delete("/{file_id}", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def delete_file(file_id: int, current_user: User = Depends(get_current_user)):
    """
    Delete an owned file.

    Raises:
        - 401: No verified identity
        - 404: File not found or not owned by the caller
        - 500: Content could not be removed; the file is kept and can be retried
    """
    file_service = FileService()
    file_service.delete_file(file_id, current_user.user_id)
    return MessageResponse(message="File deleted successfully")
