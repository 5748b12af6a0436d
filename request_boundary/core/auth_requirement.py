"""Auth Requirement Normalizer — raw route auth declaration to AuthRequirement.

Invariants:
    - Pure function: no IO, no side effects
    - Rules evaluated in order, first match wins:
        None -> REQUIRED, False -> DISABLED, {mode: required} -> REQUIRED,
        {mode: optional | try} -> OPTIONAL, anything else -> ConfigurationError
    - Error message embeds compact JSON of the declaration (None-valued keys
      dropped) and the route path

Design Decisions:
    - "try" collapses into OPTIONAL: this layer does not execute auth, so the
      difference between the two modes is invisible here
"""

import json
from collections.abc import Mapping
from typing import Any

from request_boundary.core.domain_types import AuthRequirement
from request_boundary.core.errors import ConfigurationError

_OPTIONAL_MODES = ("optional", "try")


def _strip_unset(value: Any) -> Any:
    """Drop None-valued keys, the way undefined keys vanish from JSON."""
    if isinstance(value, Mapping):
        return {k: _strip_unset(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_strip_unset(v) for v in value]
    return value


def describe_auth_options(raw_auth: Any) -> str:
    """Compact JSON rendering of a raw auth declaration for error messages."""
    return json.dumps(_strip_unset(raw_auth), separators=(",", ":"), default=str)


def normalize_auth(raw_auth: Any, route_path: str) -> AuthRequirement:
    """Map a loosely typed auth declaration to its canonical requirement."""
    if raw_auth is None:
        return AuthRequirement.REQUIRED
    if raw_auth is False:
        return AuthRequirement.DISABLED
    if isinstance(raw_auth, Mapping):
        mode = raw_auth.get("mode")
        if mode == "required":
            return AuthRequirement.REQUIRED
        if mode in _OPTIONAL_MODES:
            return AuthRequirement.OPTIONAL
    raise ConfigurationError(
        f"unexpected authentication options: {describe_auth_options(raw_auth)} "
        f"for route: {route_path}",
        route_path,
    )
