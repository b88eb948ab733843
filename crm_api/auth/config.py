"""
Configuration management for the auth package.

This module handles environment variable configuration and validation
for token signing and password hashing using Pydantic settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from crm_api.utils.logger import logger


class AuthSettings(BaseSettings):
    """Configuration for the auth system using Pydantic settings."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_file=".env"
    )

    # Token signing; the secret has no default and must come from the environment
    jwt_secret: str = Field(
        ..., min_length=16, description="HMAC secret used to sign access tokens"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_expire_days: int = Field(
        default=7, ge=1, description="Access token lifetime in days"
    )

    # Password hashing
    bcrypt_rounds: int = Field(
        default=12, ge=4, le=31, description="bcrypt cost factor"
    )


_auth_settings: AuthSettings | None = None


def get_auth_settings() -> AuthSettings:
    """
    Get the global auth settings instance.

    Returns:
        AuthSettings: The global settings instance
    """
    global _auth_settings
    if _auth_settings is None:
        _auth_settings = AuthSettings()
        logger.info(
            "AuthSettings loaded",
            jwt_algorithm=_auth_settings.jwt_algorithm,
            jwt_expire_days=_auth_settings.jwt_expire_days,
        )
    return _auth_settings


def set_auth_settings(settings: AuthSettings) -> None:
    """
    Set the global auth settings instance.

    Useful for testing.

    Args:
        settings: The settings to set
    """
    global _auth_settings
    _auth_settings = settings
