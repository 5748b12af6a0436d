"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - RequestId, RequestUuid wrap str — never pass bare strings as identity
    - AuthRequirement is closed: exactly REQUIRED, DISABLED, OPTIONAL
    - Facet order (params, query, body) is the fixed validation order

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

RequestId = NewType("RequestId", str)
RequestUuid = NewType("RequestUuid", str)


# ─── Enums ───────────────────────────────────────────────────────

class AuthRequirement(str, Enum):
    """Canonical authentication requirement of a route."""
    REQUIRED = "required"
    DISABLED = "disabled"
    OPTIONAL = "optional"


class Facet(str, Enum):
    """Independently validated parts of a request, in validation order."""
    PARAMS = "params"
    QUERY = "query"
    BODY = "body"

    @property
    def namespace(self) -> str:
        """Prefix used in validation error paths ("request params")."""
        return f"request {self.value}"


class HttpMethod(str, Enum):
    """HTTP methods a route can be declared with."""
    GET = "get"
    HEAD = "head"
    OPTIONS = "options"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"


SAFE_METHODS = frozenset({HttpMethod.GET, HttpMethod.HEAD, HttpMethod.OPTIONS})


def is_safe_method(method: str) -> bool:
    """Safe methods carry no body and need no xsrf protection."""
    return method.lower() in {m.value for m in SAFE_METHODS}
