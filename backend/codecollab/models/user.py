import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import relationship

from codecollab.db.database import Base
from codecollab.models.base import TimestampMixin, id_column, utcnow


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"
    GUEST = "GUEST"


class User(TimestampMixin, Base):
    """SQLAlchemy model for users signed in through Google"""
    __tablename__ = "users"

    id = id_column()
    google_id = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=True)
    role = Column(Enum(UserRole), default=UserRole.EDITOR, nullable=False)

    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")
    owned_projects = relationship("Project", back_populates="owner", cascade="all, delete-orphan")
    memberships = relationship("ProjectMember", back_populates="user", cascade="all, delete-orphan")


class AuthSession(Base):
    """Refresh session; one row per issued refresh token"""
    __tablename__ = "sessions"

    id = id_column()
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(1024), unique=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="sessions")

    @property
    def is_expired(self) -> bool:
        return self.expires_at < utcnow()
