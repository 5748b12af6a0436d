"""Facet Validator — schema- or function-backed validation of params, query and body.

Invariants:
    - Every validator exposes one operation: validate(raw) -> Valid | Invalid
    - A facet without a validator passes through as a read-only copy of the raw
      value (mappings -> MappingProxyType, lists -> tuples, sets -> frozensets)
    - Facets are evaluated in fixed order (params, query, body), all of them,
      then the FIRST failing facet is reported as ClientInputError
    - A validation function that raises rejects its facet like bad_request()
    - A validator that returns something other than an outcome (including a
      coroutine), or a ValidationSpec naming an unknown facet, is a route
      misconfiguration (ConfigurationError), not a client error

Design Decisions:
    - pydantic TypeAdapter as the declarative schema engine: BaseModel subclasses,
      plain types (bytes, dict[str, int]) and TypedDicts all validate the same way
    - Function validators receive a ValidationToolkit (ok / bad_request) instead
      of raising, so custom checks produce the same outcome shape as schemas
"""

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, Protocol, TypeVar, get_origin, runtime_checkable

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticUserError

from request_boundary.core.domain_types import Facet
from request_boundary.core.errors import (
    ClientInputError, ConfigurationError, RequestBoundaryError,
)
from request_boundary.core.raw_request import RawRequest

T = TypeVar("T")


# ─── Outcomes ────────────────────────────────────────────────────

@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    message: str
    details: list = field(default_factory=list)


ValidationOutcome = Valid | Invalid


@dataclass(frozen=True)
class ValidationToolkit:
    """Outcome constructors handed to validation functions."""

    def ok(self, value: Any) -> Valid:
        return Valid(value)

    def bad_request(self, message: str, details: list | None = None) -> Invalid:
        return Invalid(message, list(details or []))


TOOLKIT = ValidationToolkit()

ValidationFunction = Callable[[Any, ValidationToolkit], ValidationOutcome]


# ─── Validators ──────────────────────────────────────────────────

@runtime_checkable
class FacetValidator(Protocol):
    def validate(self, raw: Any) -> ValidationOutcome: ...


def _format_path(path: list) -> str:
    return ".".join(str(part) for part in path if part != "")


class SchemaValidator:
    """Validates and coerces a facet through a pydantic schema."""

    def __init__(self, schema: Any, namespace: str = ""):
        self.adapter = schema if isinstance(schema, TypeAdapter) else TypeAdapter(schema)
        self.namespace = namespace

    def validate(self, raw: Any) -> ValidationOutcome:
        try:
            return Valid(self.adapter.validate_python(raw))
        except ValidationError as exc:
            details = [
                {
                    "path": [self.namespace, *e["loc"]] if self.namespace else list(e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors(include_url=False)
            ]
            message = "; ".join(
                f"[{_format_path(d['path'])}]: {d['message']}" for d in details
            )
            return Invalid(message, details)


class FunctionValidator:
    """Delegates to a user function called as fn(raw, toolkit).

    An exception escaping the function rejects the facet with the exception
    text as message; boundary errors raised on purpose propagate unchanged.
    """

    def __init__(self, fn: ValidationFunction, namespace: str = ""):
        self.fn = fn
        self.namespace = namespace

    def validate(self, raw: Any) -> ValidationOutcome:
        try:
            return self.fn(raw, TOOLKIT)
        except RequestBoundaryError:
            raise
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            return Invalid(
                f"[{self.namespace}]: {reason}" if self.namespace else reason,
                [{
                    "path": [self.namespace] if self.namespace else [],
                    "message": reason,
                    "type": type(exc).__name__,
                }],
            )


def as_validator(entry: Any, facet: Facet | None = None) -> FacetValidator:
    """Wrap a ValidationSpec entry so call sites never branch on its form."""
    namespace = facet.namespace if facet else ""
    if isinstance(entry, (SchemaValidator, FunctionValidator)):
        return entry
    if isinstance(entry, (type, TypeAdapter)):
        return SchemaValidator(entry, namespace)
    if isinstance(entry, FacetValidator):
        return entry
    # dict[str, int] and Annotated[...] are callable too, but they are schemas
    if callable(entry) and get_origin(entry) is None:
        return FunctionValidator(entry, namespace)
    return SchemaValidator(entry, namespace)


# ─── ValidationSpec ──────────────────────────────────────────────

@dataclass(frozen=True)
class ValidationSpec:
    """Per-facet validators; a missing entry means pass-through."""
    params: Any = None
    query: Any = None
    body: Any = None

    @classmethod
    def coerce(
        cls,
        spec: "ValidationSpec | Mapping[str, Any] | None",
        route_path: str | None = None,
    ) -> "ValidationSpec":
        """Normalize a declaration; unknown facet names are a ConfigurationError."""
        if spec is None:
            return cls()
        if isinstance(spec, ValidationSpec):
            return spec
        unknown = set(spec) - {f.value for f in Facet}
        if unknown:
            target = f" for route: {route_path}" if route_path else ""
            raise ConfigurationError(
                f"unknown validation facets: {sorted(unknown)}{target}", route_path,
            )
        return cls(**spec)

    def for_facet(self, facet: Facet) -> Any:
        return getattr(self, facet.value)


@dataclass(frozen=True)
class RequestParts:
    params: Any
    query: Any
    body: Any


def _freeze(value: Any) -> Any:
    """Read-only copy of a raw facet, detached from the transport's containers."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(value)
    if isinstance(value, bytearray):
        return bytes(value)
    return value


def validate_facet(
    facet: Facet, raw_value: Any, entry: Any, route_path: str = "/",
) -> ValidationOutcome:
    """Run one facet's validator; pass through when none is declared."""
    if entry is None:
        return Valid(_freeze(raw_value))
    try:
        validator = as_validator(entry, facet)
    except PydanticUserError as exc:
        raise ConfigurationError(
            f"unusable schema for {facet.namespace}: {exc} for route: {route_path}",
            route_path,
        ) from exc
    outcome = validator.validate(raw_value)
    if inspect.iscoroutine(outcome):
        outcome.close()
        raise ConfigurationError(
            f"asynchronous validator for {facet.namespace} is not supported "
            f"for route: {route_path}",
            route_path,
        )
    if not isinstance(outcome, (Valid, Invalid)):
        raise ConfigurationError(
            f"validator for {facet.namespace} returned {type(outcome).__name__}, "
            f"expected ok() or bad_request() for route: {route_path}",
            route_path,
        )
    return outcome


def validate_request_parts(
    raw: RawRequest,
    spec: ValidationSpec | Mapping[str, Any] | None = None,
    route_path: str | None = None,
) -> RequestParts:
    """Validate params, query and body; raise ClientInputError on the first failure."""
    route_path = route_path or raw.route.path
    spec = ValidationSpec.coerce(spec, route_path)
    raw_values = {Facet.PARAMS: raw.params, Facet.QUERY: raw.query, Facet.BODY: raw.payload}

    outcomes = {
        facet: validate_facet(facet, raw_values[facet], spec.for_facet(facet), route_path)
        for facet in Facet
    }
    failures = [(f, o) for f, o in outcomes.items() if isinstance(o, Invalid)]
    if failures:
        facet, outcome = failures[0]
        raise ClientInputError(
            facet.value, outcome.message, outcome.details,
            other_facets=[f.value for f, _ in failures[1:]],
        )
    return RequestParts(
        params=outcomes[Facet.PARAMS].value,
        query=outcomes[Facet.QUERY].value,
        body=outcomes[Facet.BODY].value,
    )
