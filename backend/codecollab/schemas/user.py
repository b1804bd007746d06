"""
Pydantic schemas for users and authentication
"""

from datetime import datetime
from typing import Optional
from pydantic import Field

from codecollab.models.user import UserRole
from codecollab.schemas.common import CamelModel


class UserSummary(CamelModel):
    """User fields embedded in other resources"""
    id: str
    name: str
    email: Optional[str] = None
    avatar: Optional[str] = None


class UserResponse(CamelModel):
    """Schema for the signed-in user"""
    id: str
    email: str
    name: str
    avatar: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None


class GoogleLoginRequest(CamelModel):
    token: Optional[str] = Field(None, description="Google ID token")


class AuthResponse(CamelModel):
    success: bool = True
    user: UserResponse
    access_token: str
    refresh_token: str


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class RefreshResponse(CamelModel):
    access_token: str


class LogoutRequest(CamelModel):
    refresh_token: Optional[str] = None
