"""
Pydantic schemas for API request/response validation.
"""
from dashboard.schemas.files import (
    FileStatus,
    FileRecord,
    UploadResult,
    Statistics,
    DashboardSnapshot,
    ShareLinkResponse,
    FileUpdateRequest,
    DeleteResponse,
    NotificationResponse,
    UploadResponse,
)

__all__ = [
    "FileStatus",
    "FileRecord",
    "UploadResult",
    "Statistics",
    "DashboardSnapshot",
    "ShareLinkResponse",
    "FileUpdateRequest",
    "DeleteResponse",
    "NotificationResponse",
    "UploadResponse",
]
