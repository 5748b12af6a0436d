"""Boundary Installation — one call that wires the boundary into a FastAPI app.

Invariants:
    - Error handlers are always registered; logging setup is optional because
      some hosts configure the "request_boundary" logger themselves
    - Safe to call again for the same process: setup_logging replaces its handler
"""

import logging

from fastapi import FastAPI

from request_boundary.api.error_handlers import register_error_handlers
from request_boundary.config import Settings, get_settings
from request_boundary.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def install_request_boundary(
    app: FastAPI,
    settings: Settings | None = None,
    *,
    configure_logging: bool = True,
) -> None:
    """Register error handlers and, by default, the boundary's JSON logging."""
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings)
    register_error_handlers(app)
    logger.info(
        f"Request boundary installed (secured_by_default={settings.secured_by_default})",
    )
