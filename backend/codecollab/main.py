from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from loguru import logger

from codecollab.api import api_router, health_router
from codecollab.core.config import get_allowed_origins, get_settings
from codecollab.core.error_handlers import register_exception_handlers
from codecollab.core.logging_config import RequestLoggingMiddleware, configure_logging
from codecollab.db.database import init_db
from codecollab.middleware import (
    RateLimitingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from codecollab.realtime import CollaborationGateway


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan events for the FastAPI application
    """
    configure_logging()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}...")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Error during startup: {e}")
        raise

    yield

    logger.info(f"Shutting down {settings.app_name}...")


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Collaborative code editing backend: projects, documents, permissions, chat and live editing",
    version=settings.app_version,
    docs_url="/docs" if settings.enable_docs else None,
    redoc_url="/redoc" if settings.enable_docs else None,
    lifespan=lifespan
)

# Starlette runs the last added middleware first
app.add_middleware(
    RateLimitingMiddleware,
    max_requests=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window,
    enabled=settings.rate_limit_enabled,
)
app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.environment == "production")
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_bytes)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=settings.allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

app.include_router(health_router)  # Health checks at root level
app.include_router(api_router)

gateway = CollaborationGateway(settings=settings)
app.state.gateway = gateway

# Socket.IO under /socket.io, everything else handled by FastAPI
asgi_app = gateway.asgi_app(app)


def run():
    """Serve the API and the Socket.IO gateway with uvicorn"""
    uvicorn.run(
        "codecollab.main:asgi_app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info"
    )


if __name__ == "__main__":
    run()
