"""
Supabase Storage client (primary content store).

Uses the Storage REST API through httpx. When the project URL or key is
missing, MockSupabaseStorageClient stands in and serves a fixed file list.
"""
import asyncio
import json
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from dashboard.config import SupabaseConfig
from dashboard.errors import DashboardError, RemoteListError, RemoteUploadError
from dashboard.schemas.files import FileRecord, FileStatus, UploadResult
from dashboard.storage.base import CLIENT_ERRORS, IncomingFile, PrimaryStorageClient, path_segment
from dashboard.utils.logging import log_storage_request
from dashboard.utils.metrics import storage_requests_total

logger = logging.getLogger(__name__)

KIB = 1024
MIB = 1024 * 1024


def get_mock_file_list() -> List[FileRecord]:
    """
    Fixed file list served when the primary store is unavailable.
    
    Ordered by descending creation date.
    """
    return [
        FileRecord(
            id="1",
            name="intro-to-js.pdf",
            size=1200 * KIB,
            user="يوسف",
            status=FileStatus.PUBLISHED,
            created_at="2025-11-10",
        ),
        FileRecord(
            id="2",
            name="lecture3.mp4",
            size=28 * MIB,
            user="مريم",
            status=FileStatus.PENDING,
            created_at="2025-11-09",
        ),
        FileRecord(
            id="3",
            name="python-basics.pdf",
            size=2400 * KIB,
            user="أحمد",
            status=FileStatus.PUBLISHED,
            created_at="2025-11-08",
        ),
    ]


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


class MockSupabaseStorageClient(PrimaryStorageClient):
    """
    Stand-in for the primary store when it is not configured.
    
    Uploads resolve after a fixed delay so the dashboard shows its
    in-progress state; everything else returns immediately.
    """
    
    backend_name = "supabase"
    
    def __init__(self, latency_seconds: float = 1.0):
        self.latency_seconds = latency_seconds
    
    @property
    def is_mock(self) -> bool:
        return True
    
    async def upload(self, file: IncomingFile, metadata: Optional[Dict[str, Any]] = None) -> UploadResult:
        logger.info("Supabase credentials not configured. Using mock upload.")
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)
        
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
            url=f"mock://files/{file.name}",
            file_id=f"mock_{_timestamp_ms()}",
            is_mock=True,
        )
    
    async def list_files(self) -> List[FileRecord]:
        logger.info("Using mock file list")
        return get_mock_file_list()
    
    async def delete(self, file_id: str) -> bool:
        logger.info(f"Mock delete: {file_id}")
        return True
    
    async def update_file(self, file_id: str, metadata: Dict[str, Any]) -> bool:
        logger.info(f"Mock update: {file_id}", extra={"metadata": metadata})
        return True


class SupabaseStorageClient(PrimaryStorageClient):
    """
    Supabase Storage REST client for a single bucket.
    
    Every request carries ``Authorization: Bearer <key>``. Uploads are
    upserts, so re-uploading a name replaces the stored object.
    """
    
    backend_name = "supabase"
    
    def __init__(self, config: SupabaseConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the client.
        
        Args:
            config: Supabase connection settings (must be configured)
            transport: Optional httpx transport, used by tests
            
        Raises:
            ValueError: If the config lacks URL or key
        """
        if not config.is_configured:
            raise ValueError("SupabaseStorageClient requires SUPABASE_URL and SUPABASE_KEY")
        
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.storage_root,
            timeout=config.timeout,
            transport=transport,
        )
        logger.info(f"Supabase client initialized for bucket: {config.bucket}")
    
    @property
    def is_mock(self) -> bool:
        return False
    
    @property
    def bucket(self) -> str:
        return self.config.bucket
    
    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.config.key}"}
    
    def _object_path(self, name: str) -> str:
        return f"/object/{self.bucket}/{path_segment(name)}"
    
    def public_url(self, name: str) -> str:
        """Public URL of an object in the bucket."""
        return f"{self.config.storage_root}/object/public/{self.bucket}/{path_segment(name)}"
    
    async def upload(self, file: IncomingFile, metadata: Optional[Dict[str, Any]] = None) -> UploadResult:
        """
        Upload a file with a single multipart POST. No retry.
        
        Args:
            file: File to upload
            metadata: Optional metadata, sent JSON-encoded as a form field
            
        Returns:
            UploadResult with the object's public URL, or a failure result
        """
        start_time = time.time()
        storage_requests_total.labels(backend=self.backend_name, operation="upload").inc()
        
        try:
            headers = self._auth_headers()
            headers["x-upsert"] = "true"
            data = {"metadata": json.dumps(metadata)} if metadata else None
            
            response = await self._client.post(
                self._object_path(file.name),
                headers=headers,
                files={"": (file.name, file.content, file.content_type or "application/octet-stream")},
                data=data,
            )
            if not response.is_success:
                raise RemoteUploadError(
                    f"Upload failed: {response.reason_phrase}",
                    status_code=response.status_code,
                )
            
            result = UploadResult(
                success=True,
                name=file.name,
                size=file.size,
                url=self.public_url(file.name),
            )
            self._record_success("upload", start_time, file.name)
            return result
            
        except CLIENT_ERRORS as e:
            self._record_failure("upload", e, start_time, file.name)
            return UploadResult.failure(str(e) or e.__class__.__name__)
    
    async def list_files(self) -> List[FileRecord]:
        """
        List objects in the bucket.
        
        A response without an ``objects`` collection yields an empty list.
        Any failure, including a non-success status, yields the mock list.
        """
        start_time = time.time()
        storage_requests_total.labels(backend=self.backend_name, operation="list").inc()
        
        try:
            response = await self._client.get(
                f"/object/list/{self.bucket}",
                headers=self._auth_headers(),
            )
            if not response.is_success:
                raise RemoteListError("Failed to list files", status_code=response.status_code)
            
            data = response.json()
            objects = data.get("objects") if isinstance(data, dict) else None
            files = [FileRecord.model_validate(obj) for obj in (objects or [])]
            
            self._record_success("list", start_time)
            return files
            
        except CLIENT_ERRORS as e:
            self._record_failure("list", e, start_time, level=logging.WARNING)
            logger.warning("Falling back to mock file list")
            return get_mock_file_list()
    
    async def delete(self, file_id: str) -> bool:
        """
        Delete an object by name.
        
        Returns:
            True iff the response status is success-class
        """
        start_time = time.time()
        storage_requests_total.labels(backend=self.backend_name, operation="delete").inc()
        
        try:
            response = await self._client.delete(
                self._object_path(file_id),
                headers=self._auth_headers(),
            )
            if not response.is_success:
                raise DashboardError(
                    f"Delete failed: {response.reason_phrase}",
                    status_code=response.status_code,
                )
        except CLIENT_ERRORS as e:
            self._record_failure("delete", e, start_time, file_id)
            return False
        
        self._record_success("delete", start_time, file_id)
        return True
    
    async def update_file(self, file_id: str, metadata: Dict[str, Any]) -> bool:
        """
        Record a metadata update for a file.
        
        The Storage API has no metadata endpoint for this bucket layout, so
        the update is only logged.
        """
        logger.info(f"Updating file: {file_id}", extra={"metadata": metadata})
        return True
    
    async def aclose(self) -> None:
        await self._client.aclose()
