"""
Storage module for the primary (Supabase) and sharing (Drive) backends.

Each backend has a real HTTP client and a mock client; the factory picks
one per backend from configuration.
"""
from dashboard.storage.base import (
    IncomingFile,
    RemoteStorageClient,
    PrimaryStorageClient,
    SharingStorageClient,
)
from dashboard.storage.factory import get_primary_client, get_sharing_client

__all__ = [
    "IncomingFile",
    "RemoteStorageClient",
    "PrimaryStorageClient",
    "SharingStorageClient",
    "get_primary_client",
    "get_sharing_client",
]
