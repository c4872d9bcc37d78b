"""
Dashboard service: loads the file list and derives its statistics.
"""
import logging

from dashboard.schemas.files import DashboardSnapshot
from dashboard.services.statistics import compute_statistics
from dashboard.storage.base import PrimaryStorageClient

logger = logging.getLogger(__name__)


class DashboardService:
    """Service for dashboard data."""
    
    def __init__(self, primary: PrimaryStorageClient):
        self.primary = primary
    
    async def load(self) -> DashboardSnapshot:
        """
        List files from the primary store and compute statistics.
        
        Listing never fails: an unreachable store yields the mock list.
        """
        logger.info("Loading dashboard data...")
        files = await self.primary.list_files()
        return DashboardSnapshot(
            files=files,
            statistics=compute_statistics(files),
            is_mock=self.primary.is_mock,
        )
