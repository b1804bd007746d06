from datetime import timedelta
from typing import Optional, Tuple

from loguru import logger
from sqlalchemy.orm import Session

from codecollab.auth.google import GoogleIdentity, verify_google_id_token
from codecollab.core.config import get_settings
from codecollab.core.error_handlers import AuthenticationError
from codecollab.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
)
from codecollab.models.base import utcnow
from codecollab.models.user import AuthSession, User


class AuthService:
    """
    Service for Google sign-in and token sessions
    """

    def verify_google_token(self, token: str) -> GoogleIdentity:
        return verify_google_id_token(token)

    def create_or_update_user(self, db: Session, identity: GoogleIdentity) -> User:
        """
        Create the user on first sign-in, otherwise refresh the profile fields

        Args:
            db: Database session
            identity: Verified Google identity

        Returns:
            The persisted User
        """
        user = db.query(User).filter(User.google_id == identity.google_id).first()

        if user is None:
            user = User(
                google_id=identity.google_id,
                email=identity.email,
                name=identity.name,
                avatar=identity.picture,
            )
            db.add(user)
            logger.info(f"New user created: {identity.email}")
        else:
            user.email = identity.email
            user.name = identity.name
            user.avatar = identity.picture
            logger.info(f"User updated: {identity.email}")

        db.commit()
        db.refresh(user)
        return user

    def generate_tokens(self, user_id: str) -> Tuple[str, str]:
        return create_access_token(user_id), create_refresh_token(user_id)

    def save_session(self, db: Session, user_id: str, refresh_token: str) -> AuthSession:
        """
        Persist a refresh session that lives as long as the refresh token
        """
        settings = get_settings()
        session = AuthSession(
            user_id=user_id,
            token=refresh_token,
            expires_at=utcnow() + timedelta(days=settings.refresh_token_expire_days),
        )
        db.add(session)
        db.commit()
        logger.debug(f"Session saved for user: {user_id}")
        return session

    def login_with_google(self, db: Session, google_token: str) -> Tuple[User, str, str]:
        identity = self.verify_google_token(google_token)
        user = self.create_or_update_user(db, identity)
        access_token, refresh_token = self.generate_tokens(user.id)
        self.save_session(db, user.id, refresh_token)
        logger.info(f"User authenticated: {user.email}")
        return user, access_token, refresh_token

    def refresh_access_token(self, db: Session, refresh_token: str) -> str:
        """
        Issue a new access token for a live refresh session

        Raises:
            AuthenticationError: invalid or expired token, or no matching session
        """
        payload = decode_refresh_token(refresh_token)

        session = (
            db.query(AuthSession)
            .filter(AuthSession.token == refresh_token, AuthSession.user_id == payload["userId"])
            .first()
        )
        if session is None:
            raise AuthenticationError("Invalid refresh token")
        if session.is_expired:
            db.delete(session)
            db.commit()
            raise AuthenticationError("Token expired", error_code="TOKEN_EXPIRED")

        return create_access_token(payload["userId"])

    def logout(self, db: Session, user_id: str, refresh_token: Optional[str]) -> int:
        """Delete the caller's session for this refresh token; returns rows removed"""
        if not refresh_token:
            return 0
        removed = (
            db.query(AuthSession)
            .filter(AuthSession.token == refresh_token, AuthSession.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return removed
