from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from functools import lru_cache
import os


class Settings(BaseSettings):
    """
    Application settings and configuration
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "CodeCollab API"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3001

    environment: str = "development"

    # Database
    database_url: str = "sqlite:///./data/codecollab.db"
    database_echo: bool = False

    # Tokens - access and refresh tokens are signed with separate secrets
    jwt_secret: str = "change-this-access-secret"
    jwt_refresh_secret: str = "change-this-refresh-secret"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7

    # Google sign-in
    google_client_id: Optional[str] = None

    # CORS / Socket.IO origin
    frontend_url: str = "http://localhost:3000"
    allow_credentials: bool = True

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
    )
    log_rotation: str = "10 MB"
    log_retention: str = "14 days"

    # Rate limiting on /api/ (requests per window, window in seconds)
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 100
    rate_limit_window: int = 15 * 60

    # Request bodies
    max_request_bytes: int = 10 * 1024 * 1024  # 10MB

    # Collaboration
    invitation_expire_days: int = 7
    chat_history_limit: int = 100
    default_document_content: str = "// Start coding here...\n"
    realtime_enforce_edit_permission: bool = False

    enable_docs: bool = True


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings
    """
    return Settings()


def get_allowed_origins() -> List[str]:
    """Origins accepted by CORS and the Socket.IO handshake"""
    settings = get_settings()
    return [origin.strip() for origin in settings.frontend_url.split(",") if origin.strip()]


def get_database_url() -> str:
    """
    Get database URL, making sure the directory of a SQLite file exists
    """
    url = get_settings().database_url

    if url.startswith("sqlite:///") and ":memory:" not in url:
        db_path = url.replace("sqlite:///", "")
        db_dir = os.path.dirname(db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)

    return url
