"""
Health check endpoint.
Reports whether each storage backend is real or mocked.
"""
from fastapi import APIRouter, Depends

from dashboard.api.dependencies import get_primary_storage, get_sharing_storage
from dashboard.config import settings
from dashboard.storage.base import PrimaryStorageClient, SharingStorageClient

router = APIRouter()


@router.get("")
async def health_check(
    primary: PrimaryStorageClient = Depends(get_primary_storage),
    sharing: SharingStorageClient = Depends(get_sharing_storage),
):
    """
    Health check endpoint.
    Unconfigured backends are not an error; they run in mock mode.
    """
    return {
        "status": "healthy",
        "environment": settings.environment,
        "primary_storage": "mock" if primary.is_mock else "supabase",
        "sharing_storage": "mock" if sharing.is_mock else "drive",
    }
