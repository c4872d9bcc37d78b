"""
Test configuration and fixtures.
Storage backends run in mock mode with no simulated latency.
"""
import os

# Set test environment before any imports
os.environ["ENVIRONMENT"] = "test"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_KEY"] = ""
os.environ["DRIVE_API_ENDPOINT"] = ""

import pytest
from typing import AsyncGenerator, List

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from dashboard.config import DriveConfig, SupabaseConfig
from dashboard.services.dashboard_service import DashboardService
from dashboard.services.upload_service import UploadOrchestrator
from dashboard.storage.base import IncomingFile
from dashboard.storage.drive_client import MockDriveStorageClient
from dashboard.storage.supabase_client import MockSupabaseStorageClient


SUPABASE_TEST_CONFIG = SupabaseConfig(
    url="https://project.supabase.test",
    key="service-key",
    bucket="admin-files",
    timeout=5.0,
)

DRIVE_TEST_CONFIG = DriveConfig(endpoint="https://drive-bridge.test/api", timeout=5.0)


def make_pdf(name: str = "notes.pdf", size: int = 2048) -> IncomingFile:
    """Build an in-memory PDF upload."""
    return IncomingFile(
        name=name,
        content_type="application/pdf",
        content=b"%PDF-1.4\n" + b"0" * max(size - 9, 0),
    )


@pytest.fixture
def pdf_file() -> IncomingFile:
    return make_pdf()


@pytest.fixture
def mock_primary() -> MockSupabaseStorageClient:
    return MockSupabaseStorageClient(latency_seconds=0)


@pytest.fixture
def mock_sharing() -> MockDriveStorageClient:
    return MockDriveStorageClient(latency_seconds=0)


@pytest.fixture
def notifications() -> List:
    return []


@pytest.fixture
def orchestrator(mock_primary, mock_sharing, notifications) -> UploadOrchestrator:
    return UploadOrchestrator(mock_primary, mock_sharing, notify=notifications.append)


def get_test_app(primary, sharing) -> FastAPI:
    """Attach storage clients to the app the way the lifespan handler does."""
    from dashboard.main import app
    
    dashboard_service = DashboardService(primary)
    app.state.primary_client = primary
    app.state.sharing_client = sharing
    app.state.dashboard_service = dashboard_service
    app.state.upload_orchestrator = UploadOrchestrator(primary, sharing, dashboard_service)
    return app


@pytest.fixture(scope="function")
async def client(mock_primary, mock_sharing) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = get_test_app(mock_primary, mock_sharing)
    
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
