"""Facade Dependency — FastAPI dependency that hands route handlers a RequestFacade.

Invariants:
    - One facade per (request, dependency): repeated resolution returns the
      instance cached on request.state
    - Route settings (auth, tags, xsrf) are fixed when the route is declared;
      a validation mapping with an unknown facet fails right there
    - secured=None defers to Settings.secured_by_default

Design Decisions:
    - Factory returning a closure, the FastAPI idiom for parametrized dependencies
"""

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from starlette.requests import Request

from request_boundary.api.adapter import raw_request_from_starlette
from request_boundary.config import get_settings
from request_boundary.core.facade import RequestFacade
from request_boundary.core.raw_request import PayloadSettings, RouteSettings
from request_boundary.core.validation import ValidationSpec

_STATE_KEY = "request_facades"


def request_facade(
    validation: ValidationSpec | Mapping[str, Any] | None = None,
    *,
    auth: Any = None,
    secured: bool | None = None,
    tags: Iterable[str] = (),
    xsrf_required: bool | None = None,
    payload: PayloadSettings | None = None,
) -> Callable[[Request], Awaitable[RequestFacade]]:
    """Build a dependency: `facade: RequestFacade = Depends(request_facade(...))`."""
    spec = ValidationSpec.coerce(validation)
    route_settings = RouteSettings(
        auth=auth,
        tags=list(tags),
        xsrf_required=xsrf_required,
        payload=payload or PayloadSettings(),
    )

    async def dependency(request: Request) -> RequestFacade:
        cache = getattr(request.state, _STATE_KEY, None)
        if cache is None:
            cache = {}
            setattr(request.state, _STATE_KEY, cache)
        if dependency in cache:
            return cache[dependency]

        settings = get_settings()
        raw = await raw_request_from_starlette(request, route_settings)
        facade = RequestFacade.from_raw(
            raw,
            spec,
            settings.secured_by_default if secured is None else secured,
            policy=settings.to_policy(),
        )
        cache[dependency] = facade
        return facade

    return dependency
