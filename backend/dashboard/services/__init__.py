"""
Business logic services.
"""
from dashboard.services.dashboard_service import DashboardService
from dashboard.services.statistics import compute_statistics
from dashboard.services.upload_service import UploadOrchestrator, UploadWorkflowResult, validate_file

__all__ = [
    "DashboardService",
    "compute_statistics",
    "UploadOrchestrator",
    "UploadWorkflowResult",
    "validate_file",
]
