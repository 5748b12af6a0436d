"""Identity Assigner — per-request id and uuid, upstream-supplied or freshly generated.

Invariants:
    - id and uuid are resolved independently: a present id never stands in for uuid
    - Upstream id is trusted as opaque (any non-empty string is used verbatim)
    - Upstream uuid is used verbatim only when it parses as a UUID
    - Never raises

Design Decisions:
    - IdentityGenerator is injected, not a module global: tests pass a fixed
      generator instead of patching uuid4
    - uuid.uuid4 reads os.urandom, safe for concurrently built facades
"""

import uuid
from dataclasses import dataclass
from typing import Any, Protocol

from request_boundary.core.domain_types import RequestId, RequestUuid
from request_boundary.core.raw_request import RawRequest

UPSTREAM_REQUEST_ID = "request_id"
UPSTREAM_REQUEST_UUID = "request_uuid"


@dataclass(frozen=True)
class RequestIdentity:
    id: RequestId
    uuid: RequestUuid


class IdentityGenerator(Protocol):
    """Source of fresh identifiers when upstream context has none."""
    def new_id(self) -> str: ...
    def new_uuid(self) -> str: ...


class RandomIdentityGenerator:
    """Default generator: random v4 UUIDs in canonical 36-char form."""

    def new_id(self) -> str:
        return str(uuid.uuid4())

    def new_uuid(self) -> str:
        return str(uuid.uuid4())


DEFAULT_GENERATOR = RandomIdentityGenerator()


def _is_uuid_shaped(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def assign_identity(
    raw: RawRequest, generator: IdentityGenerator | None = None,
) -> RequestIdentity:
    """Resolve the request id and uuid for one raw request."""
    generator = generator or DEFAULT_GENERATOR
    upstream = raw.app or {}

    request_id = upstream.get(UPSTREAM_REQUEST_ID)
    if not (isinstance(request_id, str) and request_id):
        request_id = generator.new_id()

    request_uuid = upstream.get(UPSTREAM_REQUEST_UUID)
    if not _is_uuid_shaped(request_uuid):
        request_uuid = generator.new_uuid()

    return RequestIdentity(id=RequestId(request_id), uuid=RequestUuid(request_uuid))
