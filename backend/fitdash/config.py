"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field, field_validator, ConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Database ===
    database_url: str = Field(
        default="sqlite:///./fitdash.db",
        description="Database connection URL"
    )

    # === CORS ===
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    # === Strava ===
    strava_client_id: Optional[str] = Field(default=None)
    strava_client_secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("strava_client_secret", "strava_secret")
    )
    strava_redirect_uri: str = Field(
        default="http://localhost:8000/api/v1/strava/callback",
        description="OAuth callback registered with Strava"
    )
    strava_scope: str = Field(default="read,activity:read")
    strava_http_timeout_seconds: float = Field(default=15.0)
    strava_revoke_on_disconnect: bool = Field(
        default=False,
        description="Also deauthorize the app at Strava when a user disconnects"
    )

    # === Identity service ===
    auth_url: Optional[str] = Field(
        default=None,
        description="Base URL of the identity service that issues bearer tokens"
    )
    auth_api_key: Optional[str] = Field(default=None)

    # === Garmin ===
    credential_encryption_key: Optional[str] = Field(
        default=None,
        description="Fernet key used to encrypt stored Garmin passwords"
    )

    # === Frontend ===
    dashboard_url: str = Field(default="http://localhost:5173/dashboard")
    landing_url: str = Field(default="http://localhost:5173/")

    @field_validator('database_url')
    @classmethod
    def fix_postgres_url(cls, v: str) -> str:
        """Fix Render/Railway postgres:// URL to postgresql://"""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
