"""Error Handlers — map boundary errors onto FastAPI JSON responses.

Invariants:
    - ClientInputError → 400 with facet and field-level details
    - ConfigurationError → 500, route internals stay in the logs
    - Handlers only translate; they never retry or build a degraded facade

Design Decisions:
    - register_error_handlers(app) is opt-in: the host app decides whether the
      boundary owns these status codes
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from request_boundary.core.errors import ClientInputError, ConfigurationError
from request_boundary.infrastructure.observability import boundary_log_extra

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register boundary error handlers on the FastAPI app."""
    _register_client_input_handler(app)
    _register_configuration_handler(app)


def _register_client_input_handler(app: FastAPI) -> None:

    @app.exception_handler(ClientInputError)
    async def client_input_error_handler(request: Request, exc: ClientInputError):
        """Handle facet validation failures."""
        logger.warning(
            f"Invalid {exc.facet} on {request.url.path}: {exc.message}",
            extra=boundary_log_extra(exc, request.url.path),
        )
        return JSONResponse(
            status_code=exc.http_status, content=jsonable_encoder(exc.to_response()),
        )


def _register_configuration_handler(app: FastAPI) -> None:

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        """Route declaration is broken — log it in full, answer generically."""
        logger.error(
            f"ConfigurationError: {exc.message}",
            extra=boundary_log_extra(exc, request.url.path),
        )
        return JSONResponse(
            status_code=exc.http_status, content=jsonable_encoder(exc.to_response()),
        )
