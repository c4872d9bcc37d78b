"""
API router aggregator.
Includes all route modules.
"""
from fastapi import APIRouter
from dashboard.api import health, files

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
