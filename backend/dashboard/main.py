"""
FastAPI application entry point.
Builds the storage clients and services in the lifespan handler.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from dashboard import __version__
from dashboard.config import settings
from dashboard.api.router import api_router
from dashboard.middleware.metrics_middleware import MetricsMiddleware
from dashboard.services.dashboard_service import DashboardService
from dashboard.services.upload_service import UploadOrchestrator
from dashboard.storage.factory import get_primary_client, get_sharing_client
from dashboard.utils.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: Configure logging, build storage clients and services
    - Shutdown: Close HTTP clients
    """
    configure_logging('file-dashboard', settings.log_level)
    
    primary = get_primary_client(settings)
    sharing = get_sharing_client(settings)
    dashboard_service = DashboardService(primary)
    
    app.state.primary_client = primary
    app.state.sharing_client = sharing
    app.state.dashboard_service = dashboard_service
    app.state.upload_orchestrator = UploadOrchestrator(primary, sharing, dashboard_service)
    
    yield
    
    await primary.aclose()
    await sharing.aclose()


app = FastAPI(
    title="File Dashboard API",
    description="Backend API for the admin file dashboard",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(MetricsMiddleware)

app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "File Dashboard API",
        "version": __version__,
        "environment": settings.environment
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
