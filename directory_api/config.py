"""
Configuration management for Directory API.

Settings are read from the process environment (and an optional ``.env``
file) once at startup. The database services never read the environment
themselves; they receive an engine built from a ``Settings`` value.
"""

from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


def _parse_origins(raw: str) -> List[str]:
    """
    Parse a comma-separated list of CORS origins.

    Examples:
        "https://a.app,https://b.app" -> ["https://a.app", "https://b.app"]
        "" -> []
    """
    if not raw or not raw.strip():
        return []

    origins = [origin.strip() for origin in raw.split(",")]
    return [o for o in origins if o]


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = Field(default="Directory API")
    debug: bool = Field(default=False)

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=9009)

    # Database
    database_url: str = Field(
        default="postgresql://postgres@localhost:5432/postgres",
        description="PostgreSQL connection string; normalized to the async psycopg driver.",
    )
    pool_max_size: int = Field(default=5, ge=1)
    pool_idle_timeout: int = Field(
        default=60, ge=1, description="Seconds before a pooled connection is recycled."
    )
    pool_acquire_timeout: float = Field(
        default=10.0, gt=0, description="Seconds to wait for a free pooled connection."
    )

    # Requests
    timeout: int = Field(default=15000, ge=1, description="Request timeout in milliseconds.")

    # Security
    token: Optional[str] = Field(
        default=None,
        description="Bearer token required on directory routes. Unset disables the check.",
    )
    cors_allow_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins.",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def allowed_origins(self) -> List[str]:
        return _parse_origins(self.cors_allow_origins)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
