"""
Pydantic schemas for file records, upload results and statistics.
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileStatus(str, Enum):
    """Publication status of a listed file."""
    PUBLISHED = "published"
    PENDING = "pending"


class FileRecord(BaseModel):
    """A file as listed by the primary store. Immutable once listed."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")
    
    id: str
    name: str
    size: Optional[int] = Field(None, ge=0, description="Size in bytes")
    user: Optional[str] = None
    status: FileStatus = FileStatus.PENDING
    created_at: Optional[date] = Field(None, alias="createdAt")
    
    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)
    
    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> Any:
        # Storage APIs return full timestamps; only the date is displayed
        if isinstance(value, str) and "T" in value:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        if isinstance(value, datetime):
            return value.date()
        return value


class UploadResult(BaseModel):
    """
    Outcome of a single backend upload.
    
    Discriminated by ``success``: on failure only ``error`` is populated.
    """
    model_config = ConfigDict(populate_by_name=True)
    
    success: bool
    name: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None
    file_id: Optional[str] = Field(None, alias="fileId")
    share_link: Optional[str] = Field(None, alias="shareLink")
    is_mock: bool = Field(False, alias="isMock")
    error: Optional[str] = None
    
    @classmethod
    def failure(cls, error: str) -> "UploadResult":
        return cls(success=False, error=error)


class Statistics(BaseModel):
    """Derived dashboard metrics. Recomputed on every reload, never stored."""
    total_size_bytes: int
    file_count: int
    quota_percent: int
    quota_ceiling_bytes: int
    active_users: int
    used_space: str
    storage_label: str


class DashboardSnapshot(BaseModel):
    """File list plus the statistics computed over it."""
    files: List[FileRecord]
    statistics: Statistics
    is_mock: bool = False


class ShareLinkResponse(BaseModel):
    """Response schema for share-link generation."""
    file_id: str
    share_link: Optional[str] = None


class FileUpdateRequest(BaseModel):
    """Request schema for a metadata update."""
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DeleteResponse(BaseModel):
    """Response schema for file deletion."""
    name: str
    deleted: bool
    drive_deleted: Optional[bool] = None


class NotificationResponse(BaseModel):
    """A toast the dashboard should show."""
    message: str
    level: str
    duration_ms: int


class UploadResponse(BaseModel):
    """Response schema for a completed upload workflow."""
    status: str
    message: str
    primary: UploadResult
    sharing: Optional[UploadResult] = None
    share_link: Optional[str] = None
    sharing_error: Optional[str] = None
    statistics: Optional[Statistics] = None
    notifications: List[NotificationResponse] = Field(default_factory=list)
