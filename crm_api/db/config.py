"""
Configuration management for the MongoDB connection.

This module handles database configuration using Pydantic settings.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from crm_api.utils.logger import logger


class DatabaseSettings(BaseSettings):
    """Database configuration using Pydantic settings."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
        env_prefix="DB_",
        env_file=".env",
        populate_by_name=True,
    )

    url: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("DB_URL", "MONGODB_URI", "DATABASE_URL"),
        description="MongoDB connection string",
    )
    name: str = Field(
        default="crm_saas_platform",
        validation_alias=AliasChoices("DB_NAME", "DATABASE_NAME"),
        description="Database name",
    )

    # Connection pool settings
    max_pool_size: int = Field(default=10, description="Maximum pooled connections")
    server_selection_timeout_ms: int = Field(
        default=5000, description="How long to wait for a reachable server"
    )
    socket_timeout_ms: int = Field(
        default=45000, description="Socket read/write timeout"
    )

    def get_redacted_url(self) -> str:
        """
        Get the connection string with any credentials masked.

        Returns:
            str: URL safe to write to logs
        """
        scheme, sep, rest = self.url.partition("://")
        if "@" not in rest:
            return self.url
        return f"{scheme}{sep}***@{rest.split('@', 1)[1]}"


# Global settings instance
_db_settings: DatabaseSettings | None = None


def get_db_settings() -> DatabaseSettings:
    """
    Get the global database settings instance.

    Returns:
        DatabaseSettings: The global settings instance
    """
    global _db_settings
    if _db_settings is None:
        _db_settings = DatabaseSettings()
        logger.info(
            "DatabaseSettings loaded",
            url=_db_settings.get_redacted_url(),
            database=_db_settings.name,
        )
    return _db_settings


def set_db_settings(settings: DatabaseSettings) -> None:
    """
    Set the global database settings instance.

    Useful for testing.

    Args:
        settings: The settings to set
    """
    global _db_settings
    _db_settings = settings
