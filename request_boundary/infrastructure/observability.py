"""Structured Logging — JSON records for facade construction and boundary errors.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Boundary fields (request_id, request_uuid, route, facet, other_facets,
      error_code, path) surfaced when present, nothing else from `extra`
    - Request payloads and header values are never placed in log records
    - setup_logging owns only the "request_boundary" logger tree and replaces
      the handler it installed earlier, so repeated startup never duplicates lines

Design Decisions:
    - JSONFormatter on stdlib logging: the host app keeps full control of its
      own handlers, the boundary only adds one under its namespace
    - boundary_log_extra is the single place that turns a RequestBoundaryError
      into log fields, shared by both error handlers
"""

import logging
import json
from datetime import datetime, timezone

from request_boundary.config import Settings, get_settings
from request_boundary.core.errors import RequestBoundaryError

LOGGER_NAME = "request_boundary"

EXTRA_FIELDS = (
    "request_id", "request_uuid", "route", "facet", "other_facets",
    "error_code", "path",
)

_installed: logging.Handler | None = None


class JSONFormatter(logging.Formatter):
    """One JSON object per record with the boundary's request fields."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def boundary_log_extra(exc: RequestBoundaryError, path: str | None = None) -> dict:
    """Log fields for a failed facade construction."""
    extra = {
        "error_code": exc.code,
        "request_id": exc.context.request_id,
        "route": exc.context.route_path,
        "path": path,
    }
    facet = getattr(exc, "facet", None)
    if facet is not None:
        extra["facet"] = facet
        extra["other_facets"] = getattr(exc, "other_facets", None) or None
    return extra


def setup_logging(settings: Settings | None = None) -> logging.Handler:
    """Attach a handler to the boundary's logger using log_level / log_format."""
    global _installed
    settings = settings or get_settings()
    logger = logging.getLogger(LOGGER_NAME)
    if _installed is not None:
        logger.removeHandler(_installed)

    handler = logging.StreamHandler()
    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.propagate = False
    _installed = handler
    return handler
