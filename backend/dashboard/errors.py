"""
Error taxonomy for the upload and listing workflows.

Storage clients raise these internally and convert them to result values
before returning, so none of them crosses a client boundary.
"""
from typing import Optional


class DashboardError(Exception):
    """Base class for dashboard errors."""
    
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
    
    def __str__(self) -> str:
        return self.message


class ValidationError(DashboardError):
    """Incoming file rejected before any network call (type or size)."""


class RemoteUploadError(DashboardError):
    """Primary upload failed (non-success status or network failure)."""


class RemoteShareError(DashboardError):
    """Sharing upload or share-link generation failed. Never fatal."""


class RemoteListError(DashboardError):
    """Listing failed. Recovered by substituting the mock file list."""
