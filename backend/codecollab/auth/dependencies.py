"""
FastAPI authentication dependencies
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from codecollab.core.error_handlers import AuthenticationError, NotFoundError
from codecollab.core.security import decode_access_token
from codecollab.db.database import get_db
from codecollab.models.user import User

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """
    Resolve the user id from the bearer access token
    """
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Access token required", error_code="TOKEN_REQUIRED")

    payload = decode_access_token(credentials.credentials)
    return payload["userId"]


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> User:
    """
    Load the authenticated user
    """
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
