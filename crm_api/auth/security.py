"""
Password hashing and access token helpers.
"""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from crm_api.auth.config import AuthSettings
from crm_api.auth.constants import INVALID_TOKEN_MESSAGE
from crm_api.auth.schemas import TokenPayload
from crm_api.exceptions import AuthError
from crm_api.utils.logger import logger


@lru_cache
def get_password_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(password: str, settings: AuthSettings) -> str:
    return get_password_context(settings.bcrypt_rounds).hash(password)


def verify_password(plain_password: str, hashed_password: str, settings: AuthSettings) -> bool:
    """
    Check a password against a stored bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return get_password_context(settings.bcrypt_rounds).verify(
            plain_password, hashed_password
        )
    except ValueError as e:
        logger.warning("Stored password hash could not be verified", error=str(e))
        return False


def dummy_verify(settings: AuthSettings) -> None:
    """Spend the same time as a real verification when no user matched."""
    get_password_context(settings.bcrypt_rounds).dummy_verify()


def create_access_token(user: dict[str, Any], settings: AuthSettings) -> str:
    """
    Issue a signed access token for a stored user.

    Args:
        user: User document
        settings: Signing configuration

    Returns:
        str: Encoded JWT carrying identity, tenant and role
    """
    now = datetime.now(UTC)
    user_id = str(user["_id"])
    claims = {
        "sub": user_id,
        "userId": user_id,
        "email": user["email"],
        "organizationId": user["organizationId"],
        "role": user["role"],
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=settings.jwt_expire_days)).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: AuthSettings) -> TokenPayload:
    """
    Verify a token's signature and expiry.

    Raises:
        AuthError: If the token is malformed, tampered with or expired
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return TokenPayload.model_validate(claims)
    except (JWTError, PydanticValidationError) as e:
        logger.info("Rejected access token", error=str(e))
        raise AuthError(INVALID_TOKEN_MESSAGE) from e
