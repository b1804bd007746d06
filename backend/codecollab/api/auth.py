from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from codecollab.auth.dependencies import get_current_user, get_current_user_id
from codecollab.core.error_handlers import AuthenticationError, ValidationException
from codecollab.db.database import get_db
from codecollab.models.user import User
from codecollab.schemas import (
    AuthResponse, GoogleLoginRequest, LogoutRequest, RefreshRequest,
    RefreshResponse, SuccessResponse, UserResponse
)
from codecollab.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])
auth_service = AuthService()


@router.post("/google", response_model=AuthResponse)
async def google_login(
    body: GoogleLoginRequest,
    db: Session = Depends(get_db)
):
    """
    Sign in with a Google ID token and receive access and refresh tokens
    """
    if not body.token:
        raise ValidationException("Google token is required")

    user, access_token, refresh_token = auth_service.login_with_google(db, body.token)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=access_token,
        refresh_token=refresh_token,
    )


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_token(
    body: RefreshRequest,
    db: Session = Depends(get_db)
):
    """
    Exchange a refresh token for a new access token
    """
    if not body.refresh_token:
        raise AuthenticationError("Refresh token required", error_code="TOKEN_REQUIRED")

    return RefreshResponse(access_token=auth_service.refresh_access_token(db, body.refresh_token))


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    body: LogoutRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    End the session bound to the given refresh token
    """
    auth_service.logout(db, user_id, body.refresh_token)
    return SuccessResponse()
