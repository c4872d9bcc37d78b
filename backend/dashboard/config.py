"""
Application configuration using Pydantic Settings.
All environment variables are loaded here with sensible defaults.

Storage backends are optional: a backend whose endpoint or credentials are
missing runs in mock mode instead of failing.
"""
from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Environment
    environment: str = "dev"
    log_level: str = "INFO"
    
    # Supabase Storage (primary content store)
    supabase_url: Optional[str] = None  # e.g., https://<project>.supabase.co
    supabase_key: Optional[str] = None  # service role or anon key
    supabase_bucket: str = "admin-files"
    
    # Google Drive bridge (secondary sharing store)
    drive_api_endpoint: Optional[str] = None  # e.g., https://drive-bridge.example.com/api
    
    # Simulated latency for mock uploads (milliseconds)
    mock_primary_latency_ms: int = 1000
    mock_sharing_latency_ms: int = 800
    
    # Timeout applied to every real backend request
    request_timeout_seconds: float = 30.0
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@dataclass(frozen=True)
class SupabaseConfig:
    """Connection settings for the primary store."""
    url: Optional[str] = None
    key: Optional[str] = None
    bucket: str = "admin-files"
    timeout: float = 30.0
    
    @property
    def is_configured(self) -> bool:
        return bool(self.url) and bool(self.key)
    
    @property
    def storage_root(self) -> str:
        """REST root of the storage API, without trailing slash."""
        return f"{(self.url or '').rstrip('/')}/storage/v1"
    
    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseConfig":
        return cls(
            url=settings.supabase_url,
            key=settings.supabase_key,
            bucket=settings.supabase_bucket,
            timeout=settings.request_timeout_seconds,
        )


@dataclass(frozen=True)
class DriveConfig:
    """Connection settings for the sharing store."""
    endpoint: Optional[str] = None
    timeout: float = 30.0
    
    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint)
    
    @property
    def base_url(self) -> str:
        return (self.endpoint or "").rstrip("/")
    
    @classmethod
    def from_settings(cls, settings: Settings) -> "DriveConfig":
        return cls(
            endpoint=settings.drive_api_endpoint,
            timeout=settings.request_timeout_seconds,
        )


# Global settings instance
settings = Settings()
