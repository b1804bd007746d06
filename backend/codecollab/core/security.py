import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from codecollab.core.config import get_settings
from codecollab.core.error_handlers import AuthenticationError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _encode(user_id: str, token_type: str, secret: str, expires_delta: timedelta) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    to_encode = {
        "userId": user_id,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.algorithm)


def _decode(token: str, secret: str, token_type: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired", error_code="TOKEN_EXPIRED")
    except JWTError:
        raise AuthenticationError("Invalid token")

    if payload.get("type") != token_type or not payload.get("userId"):
        raise AuthenticationError("Invalid token")
    return payload


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a short-lived JWT access token

    Args:
        user_id: Subject of the token
        expires_delta: Override for the configured lifetime

    Returns:
        JWT token string
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(user_id, ACCESS_TOKEN_TYPE, settings.jwt_secret, expires_delta)


def create_refresh_token(user_id: str) -> str:
    """
    Create a JWT refresh token with longer expiration
    """
    settings = get_settings()
    return _encode(
        user_id,
        REFRESH_TOKEN_TYPE,
        settings.jwt_refresh_secret,
        timedelta(days=settings.refresh_token_expire_days),
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode an access token

    Raises:
        AuthenticationError: expired, malformed or wrong token type
    """
    return _decode(token, get_settings().jwt_secret, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return _decode(token, get_settings().jwt_refresh_secret, REFRESH_TOKEN_TYPE)
