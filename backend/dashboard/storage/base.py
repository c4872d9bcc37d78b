"""
Base classes for remote storage clients.

Each backend has a real implementation talking HTTP and a mock
implementation returning synthetic but well-formed results. The factory
picks one of them at construction time from the backend's configuration.

Public methods never raise: every failure is converted to a result value
(``UploadResult(success=False)``, ``False``, ``None`` or the mock list).
"""
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from dashboard.errors import DashboardError
from dashboard.schemas.files import FileRecord, UploadResult
from dashboard.utils.logging import log_storage_failure, log_storage_request
from dashboard.utils.metrics import storage_failures_total, storage_latency_seconds

# Failures a client converts to a result value instead of raising
CLIENT_ERRORS = (
    DashboardError,
    httpx.HTTPError,
    httpx.InvalidURL,
    ValueError,
    TypeError,
    AttributeError,
)


def is_plain_file_name(name: str) -> bool:
    """True when ``name`` can be used as a single object name."""
    return bool(name) and name not in (".", "..") and "/" not in name and "\\" not in name


def path_segment(value: str) -> str:
    """
    Encode a file name or id as exactly one URL path segment.
    
    Raises:
        DashboardError: If the value is empty, a dot segment, or contains
            a path separator
    """
    if not is_plain_file_name(value):
        raise DashboardError(f"Invalid object name: {value!r}")
    return quote(value, safe="")


class IncomingFile:
    """
    A file selected or dropped by the user, held fully in memory.
    
    Attributes:
        name: Original file name
        content_type: MIME type reported by the client
        size: Size in bytes
        content: Raw bytes
    """
    
    def __init__(self, name: str, content_type: str, content: bytes, size: Optional[int] = None):
        self.name = name
        self.content_type = content_type or ""
        self.content = content
        self.size = len(content) if size is None else size
    
    def __repr__(self) -> str:
        return f"IncomingFile(name={self.name!r}, content_type={self.content_type!r}, size={self.size})"


class RemoteStorageClient(ABC):
    """
    Abstract base class for storage backends.
    
    All clients must implement:
    - upload(): Store a file, returning an UploadResult
    - delete(): Remove a stored file
    """
    
    backend_name: str = "storage"
    
    @property
    @abstractmethod
    def is_mock(self) -> bool:
        """True when results are synthesized instead of fetched."""
        pass
    
    @abstractmethod
    async def upload(self, file: IncomingFile, metadata: Optional[Dict[str, Any]] = None) -> UploadResult:
        """
        Upload a file.
        
        Args:
            file: File to upload
            metadata: Optional upload metadata sent alongside the file
            
        Returns:
            UploadResult; ``success=False`` with ``error`` on any failure
        """
        pass
    
    @abstractmethod
    async def delete(self, file_id: str) -> bool:
        """
        Delete a stored file.
        
        Args:
            file_id: Backend identifier (object name or file id)
            
        Returns:
            True if the backend reported success, False otherwise
        """
        pass
    
    async def aclose(self) -> None:
        """Release network resources. No-op for mock clients."""
        return None
    
    @property
    def _logger(self) -> logging.Logger:
        return logging.getLogger(type(self).__module__)
    
    def _record_success(self, operation: str, started: float, file_name: Optional[str] = None):
        duration = time.time() - started
        storage_latency_seconds.labels(backend=self.backend_name, operation=operation).observe(duration)
        log_storage_request(
            self._logger,
            backend=self.backend_name,
            operation=operation,
            duration_ms=duration * 1000,
            file_name=file_name,
        )
    
    def _record_failure(
        self,
        operation: str,
        error: Exception,
        started: float,
        file_name: Optional[str] = None,
        level: int = logging.ERROR
    ):
        storage_failures_total.labels(backend=self.backend_name, operation=operation).inc()
        log_storage_failure(
            self._logger,
            backend=self.backend_name,
            operation=operation,
            error=str(error),
            duration_ms=(time.time() - started) * 1000,
            file_name=file_name,
            level=level,
        )
    

class SharingStorageClient(RemoteStorageClient):
    """Storage backend that can also produce externally shareable links."""
    
    @abstractmethod
    async def generate_share_link(self, file_id: str) -> Optional[str]:
        """
        Generate a shareable link for a stored file.
        
        Args:
            file_id: Backend file id
            
        Returns:
            Link string, or None on failure
        """
        pass


class PrimaryStorageClient(RemoteStorageClient):
    """Storage backend holding the dashboard's file list."""
    
    @abstractmethod
    async def list_files(self) -> List[FileRecord]:
        """
        List stored files.
        
        Returns:
            List of FileRecord (never raises)
        """
        pass
    
    @abstractmethod
    async def update_file(self, file_id: str, metadata: Dict[str, Any]) -> bool:
        """
        Update a stored file's metadata.
        
        Args:
            file_id: Backend file id
            metadata: Fields to update
            
        Returns:
            True on success, False otherwise
        """
        pass
