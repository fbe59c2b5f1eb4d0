"""Logfire configuration for ClipForge.

Tracing is opt-in: nothing is sent anywhere unless ``logfire.enabled`` is set
and a write token is available.
"""

import logging
from typing import Any, Optional

import logfire

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logfire(
    app_instance: Optional[Any] = None, settings: Optional[Settings] = None
) -> bool:
    """Configure Logfire from application settings.

    Args:
        app_instance: Optional FastAPI app to instrument
        settings: Settings to use (defaults to the cached settings)

    Returns:
        True if Logfire was configured
    """
    settings = settings or get_settings()
    if not settings.logfire.enabled:
        logger.info("Logfire is disabled in configuration")
        return False

    config: dict = {
        "service_name": settings.logfire.service_name,
        "service_version": settings.app.version,
        "environment": settings.app.environment,
        "console": None if settings.logfire.console_enabled else False,
        "send_to_logfire": "if-token-present",
    }
    if settings.logfire.token:
        config["token"] = settings.logfire.token.get_secret_value()

    logfire.configure(**config)
    logger.info(f"Logfire configured for {settings.logfire.service_name}")

    if app_instance is not None:
        logfire.instrument_fastapi(app_instance)
        logger.info("FastAPI instrumentation enabled")

    return True
