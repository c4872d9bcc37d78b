"""
FastAPI dependencies for storage clients and services.

Clients are built once in the application lifespan and stored on
``app.state``; tests replace them through ``app.dependency_overrides``.
"""
from fastapi import Request

from dashboard.services.dashboard_service import DashboardService
from dashboard.services.upload_service import UploadOrchestrator
from dashboard.storage.base import PrimaryStorageClient, SharingStorageClient


def get_primary_storage(request: Request) -> PrimaryStorageClient:
    return request.app.state.primary_client


def get_sharing_storage(request: Request) -> SharingStorageClient:
    return request.app.state.sharing_client


def get_dashboard_service(request: Request) -> DashboardService:
    return request.app.state.dashboard_service


def get_upload_orchestrator(request: Request) -> UploadOrchestrator:
    return request.app.state.upload_orchestrator
