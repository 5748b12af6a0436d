"""Starlette Adapter — builds a RawRequest from a FastAPI/Starlette request.

Invariants:
    - Header names arrive lower-cased; repeated headers become list values
    - Repeated query keys become list values, single keys stay plain strings
    - Route path is the matched route template ("/items/{id}"), not the concrete URL
    - Upstream identity is read from request.state (request_id / request_uuid),
      where earlier middleware leaves it
    - JSON bodies are parsed only when the route allows parsing; a body that
      claims to be JSON but is not is the client's fault (ClientInputError)
"""

import json
from collections.abc import Iterable
from typing import Any

from starlette.datastructures import Headers, QueryParams
from starlette.requests import Request

from request_boundary.core.domain_types import Facet
from request_boundary.core.errors import ClientInputError
from request_boundary.core.identity import UPSTREAM_REQUEST_ID, UPSTREAM_REQUEST_UUID
from request_boundary.core.raw_request import RawRequest, RawRoute, RouteSettings


def _collapse(keys: Iterable[str], multi: Headers | QueryParams) -> dict[str, Any]:
    collapsed: dict[str, Any] = {}
    for key in dict.fromkeys(keys):
        values = multi.getlist(key)
        collapsed[key] = values[0] if len(values) == 1 else values
    return collapsed


def _is_json(content_type: str) -> bool:
    mimetype = content_type.split(";", 1)[0].strip().lower()
    return mimetype == "application/json" or mimetype.endswith("+json")


def _upstream_context(request: Request) -> dict[str, Any]:
    context = {}
    for key in (UPSTREAM_REQUEST_ID, UPSTREAM_REQUEST_UUID):
        value = getattr(request.state, key, None)
        if value is not None:
            context[key] = value
    return context


async def _read_payload(request: Request, settings: RouteSettings) -> Any:
    body = await request.body()
    if not body:
        return None
    if not (settings.payload.parse and _is_json(request.headers.get("content-type", ""))):
        return body
    try:
        return json.loads(body)
    except ValueError as exc:
        raise ClientInputError(
            Facet.BODY.value, f"[{Facet.BODY.namespace}]: invalid JSON: {exc}",
            [{"path": [Facet.BODY.namespace], "message": str(exc), "type": "json_invalid"}],
        ) from exc


async def raw_request_from_starlette(
    request: Request, settings: RouteSettings | None = None,
) -> RawRequest:
    """Translate the framework request into the boundary's raw structure."""
    settings = settings or RouteSettings()
    route = request.scope.get("route")
    user = request.scope.get("user")
    return RawRequest(
        headers=_collapse(request.headers.keys(), request.headers),
        url=str(request.url),
        route=RawRoute(
            path=getattr(route, "path", request.url.path),
            method=request.method.lower(),
            settings=settings,
        ),
        params=dict(request.path_params),
        query=_collapse(request.query_params.keys(), request.query_params),
        payload=await _read_payload(request, settings),
        app=_upstream_context(request),
        is_authenticated=bool(getattr(user, "is_authenticated", False)),
    )
