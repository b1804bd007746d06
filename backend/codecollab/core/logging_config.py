"""
Logging configuration built on loguru
"""
import sys
import time
from loguru import logger

from codecollab.core.config import get_settings


def configure_logging():
    """
    Configure log sinks for the current environment
    """
    settings = get_settings()

    # Remove default logger
    logger.remove()

    if settings.environment == "production":
        # JSON lines for log aggregators
        logger.add(
            sys.stdout,
            level=settings.log_level,
            serialize=True,
            backtrace=False,
            diagnose=False
        )
    else:
        logger.add(
            sys.stdout,
            format=settings.log_format,
            level=settings.log_level,
            colorize=settings.environment == "development",
            backtrace=True,
            diagnose=settings.environment == "development"
        )

    if settings.log_file:
        logger.add(
            settings.log_file,
            format=settings.log_format,
            level=settings.log_level,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="gz",
            backtrace=True,
            diagnose=False  # Don't include sensitive data in file logs
        )

    logger.info(f"Logging configured for {settings.environment} environment")


class RequestLoggingMiddleware:
    """
    Middleware for logging requests and responses
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                status_code = message["status"]
                processing_time = time.perf_counter() - start_time
                client_ip = scope["client"][0] if scope.get("client") else "unknown"

                log_level = "WARNING" if status_code >= 400 else "INFO"
                if status_code >= 500:
                    log_level = "ERROR"
                logger.bind(
                    method=scope["method"],
                    path=scope["path"],
                    status_code=status_code,
                    processing_time=processing_time,
                    client_ip=client_ip,
                ).log(
                    log_level,
                    f"Response: {status_code} {scope['method']} {scope['path']} - {processing_time:.3f}s"
                )

            await send(message)

        await self.app(scope, receive, send_wrapper)

