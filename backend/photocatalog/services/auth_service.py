"""
Authentication Service
Handles password hashing, JWT creation, and validation.
"""

import logging
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Optional

import jwt
from jwt import PyJWTError
from passlib.context import CryptContext

from photocatalog.config import Settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_password_context(rounds: int = 10) -> CryptContext:
    """Password hashing configuration for a given bcrypt work factor."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def verify_password(plain_password: str, hashed_password: str, rounds: int = 10) -> bool:
    """Check if plain password matches hashed version."""
    try:
        return get_password_context(rounds).verify(plain_password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash could not be identified.")
        return False


def get_password_hash(password: str, rounds: int = 10) -> str:
    """Generate bcrypt hash of password."""
    return get_password_context(rounds).hash(password)


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create a new JWT access token."""
    to_encode = data.copy()
    now = datetime.utcnow()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, settings.require_jwt_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> Optional[dict]:
    """Decode and validate a JWT access token. None when tampered or expired."""
    try:
        return jwt.decode(
            token,
            settings.require_jwt_secret(),
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "iat"]},
        )
    except PyJWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None
