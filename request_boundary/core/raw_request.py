"""Raw Request — transport-level structures handed to the boundary by the server.

Invariants:
    - Owned by the transport layer; the boundary only reads them during construction
    - RouteSettings.auth is deliberately untyped (None | bool | dict | anything the
      route author wrote) — only normalize_auth() interprets it
    - Header names are lower-cased by the transport; values are str or list[str]

Design Decisions:
    - Plain mutable dataclasses: they mirror what a server hands over, the facade
      is the immutable view (see core/facade.py)
"""

from dataclasses import dataclass, field
from typing import Any

HeaderValue = str | list[str] | tuple[str, ...]

DEFAULT_MAX_PAYLOAD_BYTES = 1024 * 1024
DEFAULT_ACCEPTS = ("application/json",)


@dataclass
class PayloadSettings:
    """How the server is allowed to read the request body."""
    parse: bool = True
    max_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES
    accepts: tuple[str, ...] = DEFAULT_ACCEPTS
    output: str = "data"


@dataclass
class RouteSettings:
    """Options a route was declared with. `auth` is the raw, unchecked value."""
    auth: Any = None
    tags: list[str] = field(default_factory=list)
    xsrf_required: bool | None = None
    payload_timeout_ms: int | None = None
    idle_socket_timeout_ms: int | None = None
    payload: PayloadSettings = field(default_factory=PayloadSettings)


@dataclass
class RawRoute:
    path: str = "/"
    method: str = "get"
    settings: RouteSettings = field(default_factory=RouteSettings)


@dataclass
class RawRequest:
    """A request as the transport sees it, before validation.

    `app` is the upstream-context bag: earlier infrastructure (a proxy hop,
    a middleware) may have stored `request_id` / `request_uuid` there.
    """
    headers: dict[str, HeaderValue] = field(default_factory=dict)
    url: str = "/"
    route: RawRoute = field(default_factory=RawRoute)
    params: Any = field(default_factory=dict)
    query: Any = field(default_factory=dict)
    payload: Any = None
    app: dict[str, Any] | None = None
    is_authenticated: bool = False
