from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "development"
    TEST = "test"
    STAGING = "staging"
    PRODUCTION = "production"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_file=".env"
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current environment (development, test, staging or production)",
    )
    version: str = Field(default="0.1.0", description="API version reported by health")
    host: str = Field(default="0.0.0.0", description="Interface uvicorn binds to")
    port: int = Field(default=8000, description="Port uvicorn listens on")
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of frontend origins allowed by CORS",
    )

    # Rate limiting
    rate_limit_enabled: bool = Field(
        default=True, description="Whether request rate limiting is enforced"
    )
    rate_limit_default: str = Field(
        default="100/15minutes",
        description="Default per-client limit applied to every endpoint",
    )
    rate_limit_auth: str = Field(
        default="5/15minutes",
        description="Per-client limit for register and login attempts",
    )
    rate_limit_storage_uri: str = Field(
        default="memory://",
        description="slowapi/limits storage backend, e.g. redis://host:6379",
    )

    def get_cors_origins(self) -> list[str]:
        """Split the configured origins into a list, ignoring blanks."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


_app_settings: AppSettings | None = None


def get_app_settings() -> AppSettings:
    global _app_settings
    if _app_settings is None:
        _app_settings = AppSettings()
    return _app_settings


def set_app_settings(settings: AppSettings) -> None:
    """Replace the global app settings. Useful for testing."""
    global _app_settings
    _app_settings = settings
