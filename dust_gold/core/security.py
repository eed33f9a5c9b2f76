from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from dust_gold.config import get_settings

settings = get_settings()


def create_access_token(
    subject: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a session JWT in the shape the auth provider issues.

    Args:
        subject: The user id to encode in the token
        email: Optional email claim
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT access token
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": subject,
        "aud": settings.jwt_audience,
        "role": "authenticated",
        "exp": expire,
    }
    if email:
        to_encode["email"] = email
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a session JWT.

    Returns:
        Decoded payload if valid, None otherwise
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except JWTError:
        return None


def verify_access_token(token: str) -> Optional[str]:
    """
    Verify an access token and return the subject.

    Returns:
        The subject (user id) if valid, None otherwise
    """
    payload = decode_token(token)
    if payload is None:
        return None

    return payload.get("sub")
