"""System-Request Classifier — flags requests issued by the platform itself.

Invariants:
    - Pure function of the header map
    - True only for the exact string "true" in the current or legacy header
    - A repeated marker header (list value) counts when any occurrence is "true"
    - Header names matched case-insensitively
"""

from collections.abc import Mapping

from request_boundary.core.raw_request import HeaderValue

SYSTEM_REQUEST_HEADER = "osd-system-request"
# Older clients still send this one.
LEGACY_SYSTEM_REQUEST_HEADER = "osd-system-api"


def _is_true(value: HeaderValue) -> bool:
    if isinstance(value, (list, tuple)):
        return "true" in value
    return value == "true"


def classify_system_request(
    raw_headers: Mapping[str, HeaderValue],
    header: str = SYSTEM_REQUEST_HEADER,
    legacy_header: str = LEGACY_SYSTEM_REQUEST_HEADER,
) -> bool:
    markers = {header.lower(), legacy_header.lower()}
    return any(
        name.lower() in markers and _is_true(value)
        for name, value in raw_headers.items()
    )
