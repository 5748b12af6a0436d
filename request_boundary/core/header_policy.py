"""Header Policy — read-only, policy-filtered view of request headers.

Invariants:
    - Result is never the transport's dict: always a fresh shallow copy
    - Result is a MappingProxyType — item assignment raises TypeError
    - List values become tuples so the view cannot be mutated through them
    - secured=True withholds sensitive headers (matched case-insensitively);
      secured=False passes everything through untouched
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from request_boundary.core.raw_request import HeaderValue

DEFAULT_SENSITIVE_HEADERS = ("authorization",)

FrozenHeaders = Mapping[str, str | tuple[str, ...]]


def _freeze_value(value: HeaderValue) -> str | tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


def filter_headers(
    raw_headers: Mapping[str, HeaderValue],
    secured: bool,
    sensitive_headers: Iterable[str] = DEFAULT_SENSITIVE_HEADERS,
) -> FrozenHeaders:
    """Copy, filter and freeze the raw header mapping."""
    withheld = {name.lower() for name in sensitive_headers} if secured else set()
    copied = {
        name: _freeze_value(value)
        for name, value in raw_headers.items()
        if name.lower() not in withheld
    }
    return MappingProxyType(copied)
