"""
Authentication utilities with JWT tokens and bcrypt password hashing.

- bcrypt with salt (configurable cost, 12 by default) for password hashing
- HS256 JWTs carrying the numeric user id, split into access and refresh types
- UTC timezone consistency
"""

from datetime import UTC, datetime, timedelta
from typing import Literal

import bcrypt
from jose import JWTError, jwt

from app.config import settings

TokenType = Literal["access", "refresh"]

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain text password against a hashed password."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )


def get_password_hash(password: str, rounds: int | None = None) -> str:
    """Hash a plain text password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    hashed_password = bcrypt.hashpw(password=pwd_bytes, salt=salt)
    return hashed_password.decode("utf-8")


def _token_lifetime(token_type: TokenType) -> timedelta:
    if token_type == REFRESH_TOKEN:
        return timedelta(days=settings.refresh_token_expire_days)
    return timedelta(minutes=settings.access_token_expire_minutes)


def create_token(
    user_id: int,
    token_type: TokenType = ACCESS_TOKEN,
    expires_delta: timedelta | None = None,
    issued_at: datetime | None = None,
) -> str:
    """Create a signed JWT for ``user_id``."""
    issued_at = issued_at or datetime.now(UTC)
    expire = issued_at + (expires_delta or _token_lifetime(token_type))

    to_encode = {
        "userId": user_id,
        "sub": str(user_id),
        "type": token_type,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, **kwargs) -> str:
    return create_token(user_id, ACCESS_TOKEN, **kwargs)


def create_refresh_token(user_id: int, **kwargs) -> str:
    return create_token(user_id, REFRESH_TOKEN, **kwargs)


def decode_token(token: str, expected_type: TokenType = ACCESS_TOKEN) -> dict | None:
    """
    Decode and verify a JWT.

    Returns None when the signature is wrong, the token has expired, or the
    token was issued for a different purpose than ``expected_type``.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None

    if payload.get("type") != expected_type:
        return None
    return payload


def extract_user_id_from_token(
    token: str, expected_type: TokenType = ACCESS_TOKEN
) -> int | None:
    """Extract the user id from a JWT, or None if the token is not valid."""
    payload = decode_token(token, expected_type)
    if payload is None:
        return None
    user_id = payload.get("userId")
    if not isinstance(user_id, int):
        return None
    return user_id
