"""Request Facade — the immutable, validated request object route handlers receive.

Invariants:
    - Built only through RequestFacade.from_raw(); never mutated afterwards
    - Construction is all-or-nothing: ConfigurationError or ClientInputError
      propagate, no partially built facade is ever returned
    - Order: identity -> auth requirement -> headers -> system flag -> facets
    - headers and pass-through params/query/body are read-only copies; validated
      facets hold whatever the validator produced (never the raw containers
      unless a validation function chose to return them)

Design Decisions:
    - Frozen dataclasses all the way down: attribute assignment raises
      FrozenInstanceError instead of silently diverging from the raw request
    - BoundaryPolicy carries the header names and sensitive set so core stays
      free of config imports (config.Settings.to_policy() builds one)
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar
from urllib.parse import SplitResult, urlsplit

from request_boundary.core.auth_requirement import normalize_auth
from request_boundary.core.domain_types import (
    AuthRequirement, RequestId, RequestUuid, is_safe_method,
)
from request_boundary.core.errors import RequestBoundaryError
from request_boundary.core.header_policy import (
    DEFAULT_SENSITIVE_HEADERS, FrozenHeaders, filter_headers,
)
from request_boundary.core.identity import (
    IdentityGenerator, RequestIdentity, assign_identity,
)
from request_boundary.core.raw_request import RawRequest, RouteSettings
from request_boundary.core.system_request import (
    LEGACY_SYSTEM_REQUEST_HEADER, SYSTEM_REQUEST_HEADER, classify_system_request,
)
from request_boundary.core.validation import ValidationSpec, validate_request_parts

logger = logging.getLogger(__name__)

P = TypeVar("P")
Q = TypeVar("Q")
B = TypeVar("B")


@dataclass(frozen=True)
class BoundaryPolicy:
    """Header names and exposure rules applied while building a facade."""
    sensitive_headers: tuple[str, ...] = DEFAULT_SENSITIVE_HEADERS
    system_request_header: str = SYSTEM_REQUEST_HEADER
    legacy_system_request_header: str = LEGACY_SYSTEM_REQUEST_HEADER


DEFAULT_POLICY = BoundaryPolicy()


# ─── Route Info ──────────────────────────────────────────────────

@dataclass(frozen=True)
class RouteTimeout:
    payload: int | None = None
    idle_socket: int | None = None


@dataclass(frozen=True)
class RouteBodyOptions:
    parse: bool
    max_bytes: int
    accepts: tuple[str, ...]
    output: str


@dataclass(frozen=True)
class RouteOptions:
    auth_required: AuthRequirement
    xsrf_required: bool
    tags: tuple[str, ...] = ()
    timeout: RouteTimeout = field(default_factory=RouteTimeout)
    body: RouteBodyOptions | None = None


@dataclass(frozen=True)
class RouteInfo:
    path: str
    method: str
    options: RouteOptions


def _xsrf_required(method: str, settings: RouteSettings) -> bool:
    if is_safe_method(method):
        return False
    return settings.xsrf_required is not False


def _body_options(method: str, settings: RouteSettings) -> RouteBodyOptions | None:
    if is_safe_method(method):
        return None
    payload = settings.payload
    return RouteBodyOptions(
        parse=payload.parse,
        max_bytes=payload.max_bytes,
        accepts=tuple(payload.accepts),
        output=payload.output,
    )


def build_route_info(raw: RawRequest, auth_required: AuthRequirement) -> RouteInfo:
    route = raw.route
    method = route.method.lower()
    settings = route.settings
    return RouteInfo(
        path=route.path,
        method=method,
        options=RouteOptions(
            auth_required=auth_required,
            xsrf_required=_xsrf_required(method, settings),
            tags=tuple(settings.tags or ()),
            timeout=RouteTimeout(
                payload=settings.payload_timeout_ms,
                idle_socket=settings.idle_socket_timeout_ms,
            ),
            body=_body_options(method, settings),
        ),
    )


# ─── Facade ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class AuthState:
    is_authenticated: bool


@dataclass(frozen=True)
class RequestFacade(Generic[P, Q, B]):
    identity: RequestIdentity
    url: SplitResult
    headers: FrozenHeaders
    is_system_request: bool
    route: RouteInfo
    auth: AuthState
    params: P
    query: Q
    body: B
    _raw: RawRequest = field(repr=False, compare=False)

    @property
    def id(self) -> RequestId:
        return self.identity.id

    @property
    def uuid(self) -> RequestUuid:
        return self.identity.uuid

    @classmethod
    def from_raw(
        cls,
        raw: RawRequest,
        validation: ValidationSpec | Mapping[str, Any] | None = None,
        secured: bool = True,
        *,
        generator: IdentityGenerator | None = None,
        policy: BoundaryPolicy = DEFAULT_POLICY,
    ) -> "RequestFacade[P, Q, B]":
        """Build the facade for one raw request.

        Raises:
            ConfigurationError: the route's auth declaration or a validator is unusable.
            ClientInputError: a facet validator rejected the client's data.
        """
        identity = assign_identity(raw, generator)
        log_extra = {
            "request_id": identity.id,
            "request_uuid": identity.uuid,
            "route": raw.route.path,
        }
        try:
            auth_required = normalize_auth(raw.route.settings.auth, raw.route.path)
            headers = filter_headers(raw.headers, secured, policy.sensitive_headers)
            is_system_request = classify_system_request(
                raw.headers,
                policy.system_request_header,
                policy.legacy_system_request_header,
            )
            parts = validate_request_parts(raw, validation)
        except RequestBoundaryError as exc:
            exc.context.request_id = identity.id
            logger.debug(
                f"Request facade construction failed: {exc.message}",
                extra={**log_extra, "error_code": exc.code},
            )
            raise

        logger.debug(
            f"Request facade built for {raw.route.method.upper()} {raw.route.path}",
            extra=log_extra,
        )
        return cls(
            identity=identity,
            url=urlsplit(raw.url),
            headers=headers,
            is_system_request=is_system_request,
            route=build_route_info(raw, auth_required),
            auth=AuthState(is_authenticated=bool(raw.is_authenticated)),
            params=parts.params,
            query=parts.query,
            body=parts.body,
            _raw=raw,
        )


def is_real_request(obj: Any) -> bool:
    """True for a raw transport request, False for an already built facade."""
    return isinstance(obj, RawRequest)


def ensure_raw_request(obj: "RequestFacade | RawRequest") -> RawRequest:
    """Return the transport request underneath a facade (or the raw request itself)."""
    if isinstance(obj, RequestFacade):
        return obj._raw
    if isinstance(obj, RawRequest):
        return obj
    raise TypeError(f"expected RequestFacade or RawRequest, got {type(obj).__name__}")
