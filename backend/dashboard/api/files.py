"""
File endpoints for the admin dashboard.

- GET    /files                 - File list with statistics
- GET    /files/stats           - Statistics only
- POST   /files/upload          - Run the upload workflow for one PDF
- DELETE /files/{name}          - Delete from primary (and Drive if an id is given)
- POST   /files/{file_id}/share - Generate a Drive share link
- PATCH  /files/{file_id}       - Update file metadata
"""
import logging
import posixpath
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from dashboard.api.dependencies import (
    get_dashboard_service,
    get_primary_storage,
    get_sharing_storage,
    get_upload_orchestrator,
)
from dashboard.schemas.files import (
    DashboardSnapshot,
    DeleteResponse,
    FileUpdateRequest,
    NotificationResponse,
    ShareLinkResponse,
    Statistics,
    UploadResponse,
)
from dashboard.services.dashboard_service import DashboardService
from dashboard.services.upload_service import UploadOrchestrator, WorkflowStatus, validate_file
from dashboard.storage.base import IncomingFile, PrimaryStorageClient, SharingStorageClient

logger = logging.getLogger(__name__)

router = APIRouter()


def _basename(filename: str) -> str:
    """Strip any client-side directory part, e.g. ``C:\\docs\\a.pdf`` -> ``a.pdf``."""
    return posixpath.basename(filename.replace("\\", "/"))


@router.get("", response_model=DashboardSnapshot)
async def list_files(dashboard: DashboardService = Depends(get_dashboard_service)):
    """List files with their statistics."""
    return await dashboard.load()


@router.get("/stats", response_model=Statistics)
async def get_statistics(dashboard: DashboardService = Depends(get_dashboard_service)):
    """Statistics for the current file list."""
    snapshot = await dashboard.load()
    return snapshot.statistics


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
):
    """
    Upload a PDF to the primary store and share it through Drive.
    
    - 400 when the name is unusable, the file is not a PDF or exceeds 200MB
    - 502 when the primary store rejects the upload
    - 201 otherwise, even if the Drive step failed
    """
    name = _basename(file.filename or "upload.pdf")
    content_type = file.content_type or ""
    
    # Validate from the part headers so a rejected upload is never read
    incoming = IncomingFile(name=name, content_type=content_type, content=b"", size=file.size or 0)
    if validate_file(incoming).ok:
        incoming = IncomingFile(name=name, content_type=content_type, content=await file.read())
    
    result = await orchestrator.run(incoming)
    
    if result.status == WorkflowStatus.REJECTED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)
    if result.status == WorkflowStatus.FAILED:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": result.message, "error": str(result.error)},
        )
    
    return UploadResponse(
        status=result.status.value,
        message=result.message,
        primary=result.primary,
        sharing=result.sharing,
        share_link=result.share_link,
        sharing_error=str(result.sharing_error) if result.sharing_error else None,
        statistics=result.snapshot.statistics if result.snapshot else None,
        notifications=[
            NotificationResponse(message=n.message, level=n.level.value, duration_ms=n.duration_ms)
            for n in result.notifications
        ],
    )


@router.delete("/{name}", response_model=DeleteResponse)
async def delete_file(
    name: str,
    drive_file_id: Optional[str] = Query(None, description="Drive file id to delete as well"),
    primary: PrimaryStorageClient = Depends(get_primary_storage),
    sharing: SharingStorageClient = Depends(get_sharing_storage),
):
    """
    Delete a file from the primary store.
    
    Drive deletion is best effort and does not affect the status code.
    """
    deleted = await primary.delete(name)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to delete {name}"
        )
    
    drive_deleted = None
    if drive_file_id:
        drive_deleted = await sharing.delete(drive_file_id)
        if not drive_deleted:
            logger.warning(f"Drive delete failed for {drive_file_id}")
    
    return DeleteResponse(name=name, deleted=True, drive_deleted=drive_deleted)


@router.post("/{file_id}/share", response_model=ShareLinkResponse)
async def share_file(
    file_id: str,
    sharing: SharingStorageClient = Depends(get_sharing_storage),
):
    """Generate a shareable Drive link for a file."""
    link = await sharing.generate_share_link(file_id)
    if link is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate share link"
        )
    return ShareLinkResponse(file_id=file_id, share_link=link)


@router.patch("/{file_id}")
async def update_file(
    file_id: str,
    request: FileUpdateRequest,
    primary: PrimaryStorageClient = Depends(get_primary_storage),
):
    """Update a file's metadata."""
    updated = await primary.update_file(file_id, request.metadata)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to update {file_id}"
        )
    return {"file_id": file_id, "updated": True}
