# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   target = settings.resolve_upstream()
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Nothing here is required: the service must boot without an upstream so that
# /api/test-api can report the missing configuration.
# =============================================================================

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Ordered resolution list for the upstream base URL. The first variable that
# is set wins: the runtime (server-only) value can be changed on a deployed
# service, the build value is baked into the image.
UPSTREAM_URL_SOURCES: tuple[tuple[str, str], ...] = (
    ("API_URL", "runtime"),
    ("PUBLIC_API_URL", "build"),
)


@dataclass(frozen=True)
class UpstreamTarget:
    """Resolved upstream base URL and the variable it came from."""
    base_url: str
    variable: str
    source: str

    @property
    def source_label(self) -> str:
        """Human-readable origin, e.g. "API_URL (runtime)"."""
        return f"{self.variable} ({self.source})"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance or the
    `get_settings` dependency.
    """

    # -------------------------------------------------------------------------
    # Upstream Credit API
    # -------------------------------------------------------------------------

    API_URL: str | None = Field(
        default=None,
        description="Upstream base URL read at runtime (takes precedence)"
    )

    PUBLIC_API_URL: str | None = Field(
        default=None,
        description="Upstream base URL baked in at build time (fallback)"
    )

    API_VERSION: int = Field(
        default=1,
        ge=1,
        description="Version segment of the upstream path (/api/v{N}/solicitudes)"
    )

    # -------------------------------------------------------------------------
    # Timeouts (seconds)
    # -------------------------------------------------------------------------
    # Writes may involve slow downstream processing; reads should be fast.

    SUBMIT_TIMEOUT_SECONDS: float = Field(
        default=180.0,
        gt=0,
        description="Deadline for POST /api/solicitudes upstream calls"
    )

    LIST_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="Deadline for GET and DELETE upstream calls"
    )

    HEALTH_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Deadline for the /api/test-api health ping"
    )

    # -------------------------------------------------------------------------
    # Identity-Aware Proxy
    # -------------------------------------------------------------------------

    IAP_AUDIENCE: str | None = Field(
        default=None,
        description="Expected audience, e.g. /projects/PROJECT_NUMBER/apps/PROJECT_ID"
    )

    DEV_ADMIN_TOKEN: str | None = Field(
        default=None,
        description="Development-only token that opens an admin session"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    HOSTNAME: str = Field(
        default="0.0.0.0",
        description="Host to bind the server to"
    )

    PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the server"
    )

    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    FALLBACK_STORE_PATH: str = Field(
        default=".data/solicitudes.json",
        description="JSON file backing the local fallback store"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    def resolve_upstream(self) -> UpstreamTarget | None:
        """
        Resolve the upstream base URL from UPSTREAM_URL_SOURCES.

        Returns:
            UpstreamTarget with the trailing slash removed, or None when no
            source variable is set.
        """
        for variable, source in UPSTREAM_URL_SOURCES:
            value = getattr(self, variable)
            if value and value.strip():
                return UpstreamTarget(
                    base_url=value.strip().rstrip("/"),
                    variable=variable,
                    source=source,
                )
        return None

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access. Route handlers receive it through Depends()
    so tests can swap it with app.dependency_overrides.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
