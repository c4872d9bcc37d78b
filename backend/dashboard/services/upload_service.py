"""
Upload workflow: validate, store in the primary backend, share through the
secondary backend, then refresh the dashboard.

Each stage returns a value consumed by the next one:

    validate_file        -> ValidationOutcome   (rejection ends the workflow)
    primary.upload       -> UploadResult        (failure ends the workflow)
    sharing.upload       -> UploadResult        (failure is only logged)
    DashboardService.load -> DashboardSnapshot

The workflow never raises for storage problems; the caller gets an
UploadWorkflowResult describing what happened plus the notifications the
dashboard should show.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from dashboard.errors import DashboardError, RemoteShareError, RemoteUploadError, ValidationError
from dashboard.schemas.files import DashboardSnapshot, UploadResult
from dashboard.services.dashboard_service import DashboardService
from dashboard.storage.base import IncomingFile, PrimaryStorageClient, SharingStorageClient, is_plain_file_name
from dashboard.utils.logging import log_upload_event
from dashboard.utils.metrics import upload_workflows_total

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 200 * 1024 * 1024  # 209,715,200
REQUIRED_MIME_FRAGMENT = "pdf"

MSG_INVALID_NAME = "Invalid file name."
MSG_UNSUPPORTED_TYPE = "Unsupported file type. Please upload a PDF file."
MSG_TOO_LARGE = "File exceeds the maximum size (200MB)."
MSG_UPLOADING = "Uploading file..."
MSG_PRIMARY_FAILED = "Failed to upload the file to cloud storage."
MSG_SUCCEEDED = "File uploaded successfully."


class WorkflowStatus(str, Enum):
    """Final state of an upload workflow."""
    REJECTED = "rejected"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    """A user-facing message (shown as a toast by the dashboard)."""
    message: str
    level: NotificationLevel = NotificationLevel.SUCCESS
    duration_ms: int = 3000


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of checking an incoming file."""
    error: Optional[ValidationError] = None
    
    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class UploadWorkflowResult:
    """
    Everything a single upload workflow produced.
    
    Attributes:
        status: rejected, failed or succeeded
        message: Final user-facing message
        primary: Primary upload result (None if rejected)
        sharing: Sharing upload result (None unless primary succeeded)
        snapshot: Refreshed dashboard data (None unless primary succeeded)
        share_link: Link from the sharing store, if one was obtained
        error: The fatal error for rejected/failed workflows
        sharing_error: Non-fatal sharing error, kept for diagnostics
        notifications: Messages emitted in order
        input_cleared: The upload input is reset when the workflow ends
    """
    status: WorkflowStatus
    message: str
    primary: Optional[UploadResult] = None
    sharing: Optional[UploadResult] = None
    snapshot: Optional[DashboardSnapshot] = None
    share_link: Optional[str] = None
    error: Optional[DashboardError] = None
    sharing_error: Optional[RemoteShareError] = None
    notifications: List[Notification] = field(default_factory=list)
    input_cleared: bool = True
    
    @property
    def succeeded(self) -> bool:
        return self.status == WorkflowStatus.SUCCEEDED


def validate_file(file: IncomingFile) -> ValidationOutcome:
    """
    Check type and size before anything is sent.
    
    The name must be a plain file name (no path separators or dot
    segments), the MIME type must contain "pdf" and the size must not
    exceed MAX_UPLOAD_BYTES (exactly 200 MiB is accepted).
    """
    if not is_plain_file_name(file.name):
        return ValidationOutcome(ValidationError(MSG_INVALID_NAME))
    if REQUIRED_MIME_FRAGMENT not in (file.content_type or ""):
        return ValidationOutcome(ValidationError(MSG_UNSUPPORTED_TYPE))
    if file.size > MAX_UPLOAD_BYTES:
        return ValidationOutcome(ValidationError(MSG_TOO_LARGE))
    return ValidationOutcome()


def _iso_now(now: datetime) -> str:
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UploadOrchestrator:
    """
    Runs the upload workflow for one file at a time.
    
    Workflows on the same orchestrator are serialized by a lock, so a
    second upload waits for the first to finish.
    """
    
    def __init__(
        self,
        primary: PrimaryStorageClient,
        sharing: SharingStorageClient,
        dashboard: Optional[DashboardService] = None,
        notify: Optional[Callable[[Notification], None]] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.primary = primary
        self.sharing = sharing
        self.dashboard = dashboard or DashboardService(primary)
        self._notify = notify
        self._clock = clock
        self._lock = asyncio.Lock()
    
    async def run(self, file: IncomingFile) -> UploadWorkflowResult:
        """
        Run the full workflow for a file.
        
        Args:
            file: The selected or dropped file
            
        Returns:
            UploadWorkflowResult (never raises for validation or storage errors)
        """
        async with self._lock:
            start_time = time.time()
            result = await self._run(file)
            upload_workflows_total.labels(outcome=result.status.value).inc()
            log_upload_event(
                logger,
                outcome=result.status.value,
                file_name=file.name,
                duration_ms=(time.time() - start_time) * 1000,
                error=str(result.error) if result.error else None,
                primary_mock=self.primary.is_mock,
                sharing_mock=self.sharing.is_mock,
            )
            return result
    
    async def _run(self, file: IncomingFile) -> UploadWorkflowResult:
        notifications: List[Notification] = []
        
        def emit(message: str, level: NotificationLevel, duration_ms: int = 3000):
            notification = Notification(message, level, duration_ms)
            notifications.append(notification)
            if self._notify is not None:
                self._notify(notification)
        
        # 1. Validate
        outcome = validate_file(file)
        if not outcome.ok:
            emit(outcome.error.message, NotificationLevel.ERROR)
            return UploadWorkflowResult(
                status=WorkflowStatus.REJECTED,
                message=outcome.error.message,
                error=outcome.error,
                notifications=notifications,
            )
        
        logger.info(f"Uploading file: {file.name}")
        emit(MSG_UPLOADING, NotificationLevel.INFO, 5000)
        
        # 2. Primary upload
        primary = await self.primary.upload(file)
        if not primary.success:
            emit(MSG_PRIMARY_FAILED, NotificationLevel.ERROR)
            return UploadWorkflowResult(
                status=WorkflowStatus.FAILED,
                message=MSG_PRIMARY_FAILED,
                primary=primary,
                error=RemoteUploadError(primary.error or MSG_PRIMARY_FAILED),
                notifications=notifications,
            )
        
        # 3. Sharing upload (best effort)
        sharing, share_link, sharing_error = await self._share(file, primary)
        
        emit(MSG_SUCCEEDED, NotificationLevel.SUCCESS)
        
        # 4. Refresh
        snapshot = await self.dashboard.load()
        
        return UploadWorkflowResult(
            status=WorkflowStatus.SUCCEEDED,
            message=MSG_SUCCEEDED,
            primary=primary,
            sharing=sharing,
            snapshot=snapshot,
            share_link=share_link,
            sharing_error=sharing_error,
            notifications=notifications,
        )
    
    async def _share(self, file: IncomingFile, primary: UploadResult):
        metadata = {
            "uploadedAt": _iso_now(self._clock()),
            "primaryUrl": primary.url,
        }
        sharing = await self.sharing.upload(file, metadata)
        
        if not sharing.success:
            error = RemoteShareError(sharing.error or "Sharing upload failed")
            logger.warning(f"Sharing upload failed for {file.name}: {error}")
            return sharing, None, error
        
        share_link = sharing.share_link
        if not share_link and sharing.file_id:
            share_link = await self.sharing.generate_share_link(sharing.file_id)
            if share_link is None:
                logger.warning(f"No share link available for {file.name}")
                return sharing, None, RemoteShareError("Failed to generate share link")
        
        logger.info(f"Drive share link: {share_link}")
        return sharing, share_link, None
