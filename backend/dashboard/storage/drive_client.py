"""
Google Drive bridge client (secondary sharing store).

Talks to a small server-side bridge that owns the Drive credentials:
- POST {endpoint}/upload          multipart file + JSON metadata
- POST {endpoint}/share/{fileId}  returns {"shareLink": ...}
- DELETE {endpoint}/delete/{fileId}

Drive is only used to obtain shareable links, so every failure here is
reported as a value and never blocks the caller.
"""
import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from dashboard.config import DriveConfig
from dashboard.errors import RemoteShareError
from dashboard.schemas.files import UploadResult
from dashboard.storage.base import CLIENT_ERRORS, IncomingFile, SharingStorageClient, path_segment
from dashboard.utils.logging import log_storage_request
from dashboard.utils.metrics import storage_requests_total

logger = logging.getLogger(__name__)

VIEWER_URL_TEMPLATE = "https://drive.google.com/file/d/{file_id}/view"


def viewer_url(file_id: str) -> str:
    """Drive viewer URL for a file id."""
    return VIEWER_URL_TEMPLATE.format(file_id=file_id)


class MockDriveStorageClient(SharingStorageClient):
    """Stand-in for the Drive bridge when no endpoint is configured."""
    
    backend_name = "drive"
    
    def __init__(self, latency_seconds: float = 0.8):
        self.latency_seconds = latency_seconds
    
    @property
    def is_mock(self) -> bool:
        return True
    
    async def upload(self, file: IncomingFile, metadata: Optional[Dict[str, Any]] = None) -> UploadResult:
        logger.info("Drive API endpoint not configured. Using mock upload.")
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)
        
        file_id = f"mock_{int(time.time() * 1000)}"
        log_storage_request(
            logger,
            backend=self.backend_name,
            operation="upload",
            file_name=file.name,
            is_mock=True
        )
        return UploadResult(
            success=True,
            name=file.name,
            size=file.size,
            file_id=file_id,
            share_link=viewer_url(file_id),
            is_mock=True,
        )
    
    async def generate_share_link(self, file_id: str) -> Optional[str]:
        return viewer_url(file_id)
    
    async def delete(self, file_id: str) -> bool:
        logger.info(f"Mock Drive delete: {file_id}")
        return True


class DriveStorageClient(SharingStorageClient):
    """HTTP client for the Drive bridge."""
    
    backend_name = "drive"
    
    def __init__(self, config: DriveConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the client.
        
        Args:
            config: Drive bridge settings (must be configured)
            transport: Optional httpx transport, used by tests
            
        Raises:
            ValueError: If no endpoint is configured
        """
        if not config.is_configured:
            raise ValueError("DriveStorageClient requires DRIVE_API_ENDPOINT")
        
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            transport=transport,
        )
        logger.info(f"Drive bridge client initialized: {config.base_url}")
    
    @property
    def is_mock(self) -> bool:
        return False
    
    async def upload(self, file: IncomingFile, metadata: Optional[Dict[str, Any]] = None) -> UploadResult:
        """
        Upload a file to Drive through the bridge. No retry.
        
        Returns:
            UploadResult with ``file_id`` and ``share_link``, or a failure result
        """
        start_time = time.time()
        storage_requests_total.labels(backend=self.backend_name, operation="upload").inc()
        
        try:
            response = await self._client.post(
                "/upload",
                files={"file": (file.name, file.content, file.content_type or "application/octet-stream")},
                data={"metadata": json.dumps(metadata or {})},
            )
            if not response.is_success:
                raise RemoteShareError(
                    f"Drive upload failed: {response.reason_phrase}",
                    status_code=response.status_code,
                )
            
            result = response.json()
            upload_result = UploadResult(
                success=True,
                name=file.name,
                size=file.size,
                file_id=result.get("fileId"),
                share_link=result.get("shareLink"),
            )
            self._record_success("upload", start_time, file.name)
            return upload_result
            
        except CLIENT_ERRORS as e:
            self._record_failure("upload", e, start_time, file.name, level=logging.WARNING)
            return UploadResult.failure(str(e) or e.__class__.__name__)
    
    async def generate_share_link(self, file_id: str) -> Optional[str]:
        """
        Ask the bridge for a shareable link.
        
        Returns:
            The server-provided link, or None on any failure
        """
        start_time = time.time()
        storage_requests_total.labels(backend=self.backend_name, operation="share").inc()
        
        try:
            response = await self._client.post(f"/share/{path_segment(file_id)}")
            if not response.is_success:
                raise RemoteShareError("Failed to generate share link", status_code=response.status_code)
            
            link = response.json().get("shareLink")
            self._record_success("share", start_time)
            return link
            
        except CLIENT_ERRORS as e:
            self._record_failure("share", e, start_time, level=logging.WARNING)
            return None
    
    async def delete(self, file_id: str) -> bool:
        """
        Delete a file from Drive.
        
        Returns:
            True iff the response status is success-class
        """
        start_time = time.time()
        storage_requests_total.labels(backend=self.backend_name, operation="delete").inc()
        
        try:
            response = await self._client.delete(f"/delete/{path_segment(file_id)}")
            if not response.is_success:
                raise RemoteShareError(
                    f"Drive delete failed: {response.reason_phrase}",
                    status_code=response.status_code,
                )
        except CLIENT_ERRORS as e:
            self._record_failure("delete", e, start_time, file_id, level=logging.WARNING)
            return False
        
        self._record_success("delete", start_time, file_id)
        return True
    
    async def aclose(self) -> None:
        await self._client.aclose()
