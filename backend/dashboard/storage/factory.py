"""
Storage client factory.
Selects real or mock clients based on backend configuration.
"""
import logging
from typing import Optional

import httpx

from dashboard.config import DriveConfig, Settings, SupabaseConfig
from dashboard.storage.base import PrimaryStorageClient, SharingStorageClient
from dashboard.storage.drive_client import DriveStorageClient, MockDriveStorageClient
from dashboard.storage.supabase_client import MockSupabaseStorageClient, SupabaseStorageClient

logger = logging.getLogger(__name__)


def get_primary_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> PrimaryStorageClient:
    """
    Build the primary store client.
    
    - SUPABASE_URL and SUPABASE_KEY set → SupabaseStorageClient
    - Either missing → MockSupabaseStorageClient
    
    Args:
        settings: Application settings
        transport: Optional httpx transport passed to the real client
        
    Returns:
        PrimaryStorageClient instance (never raises for missing config)
    """
    config = SupabaseConfig.from_settings(settings)
    if config.is_configured:
        logger.info("Using Supabase storage")
        return SupabaseStorageClient(config, transport=transport)
    
    logger.warning(
        "Supabase storage not configured. "
        "Set SUPABASE_URL and SUPABASE_KEY. Using mock storage."
    )
    return MockSupabaseStorageClient(latency_seconds=settings.mock_primary_latency_ms / 1000)


def get_sharing_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> SharingStorageClient:
    """
    Build the sharing store client.
    
    - DRIVE_API_ENDPOINT set → DriveStorageClient
    - Missing → MockDriveStorageClient
    
    Args:
        settings: Application settings
        transport: Optional httpx transport passed to the real client
        
    Returns:
        SharingStorageClient instance (never raises for missing config)
    """
    config = DriveConfig.from_settings(settings)
    if config.is_configured:
        logger.info("Using Drive bridge for sharing")
        return DriveStorageClient(config, transport=transport)
    
    logger.warning("Drive API endpoint not configured. Set DRIVE_API_ENDPOINT. Using mock sharing.")
    return MockDriveStorageClient(latency_seconds=settings.mock_sharing_latency_ms / 1000)
