"""
Google ID token verification
"""
from dataclasses import dataclass
from typing import Optional

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from loguru import logger

from codecollab.core.config import get_settings
from codecollab.core.error_handlers import AuthenticationError


@dataclass(frozen=True)
class GoogleIdentity:
    google_id: str
    email: str
    name: str
    picture: Optional[str] = None


def verify_google_id_token(token: str, client_id: Optional[str] = None) -> GoogleIdentity:
    """
    Verify a Google ID token against the configured OAuth client

    Raises:
        AuthenticationError: client id missing, or the token is not a valid
            Google ID token for that audience
    """
    client_id = client_id or get_settings().google_client_id
    if not client_id:
        logger.error("Google sign-in attempted but GOOGLE_CLIENT_ID is not configured")
        raise AuthenticationError("Authentication failed", error_code="GOOGLE_NOT_CONFIGURED")

    try:
        payload = id_token.verify_oauth2_token(token, google_requests.Request(), client_id)
    except ValueError as e:
        logger.warning(f"Google token verification failed: {e}")
        raise AuthenticationError("Authentication failed", error_code="GOOGLE_AUTH_FAILED")

    email = payload.get("email")
    if not payload.get("sub") or not email:
        raise AuthenticationError("Authentication failed", error_code="GOOGLE_AUTH_FAILED")

    return GoogleIdentity(
        google_id=payload["sub"],
        email=email,
        name=payload.get("name") or email,
        picture=payload.get("picture"),
    )
