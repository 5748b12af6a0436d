"""Request Facade — end-to-end construction from a raw request.

Tests cover:
    - id / uuid from upstream context or the injected generator
    - headers: frozen copy, authorization withheld by default, exposed when secured=False
    - is_system_request for current and legacy markers
    - route.options.auth_required table and ConfigurationError messages
    - params / query / body with schema and function validators
    - route info (xsrf, tags, timeouts, body options), url, auth state
    - immutability and raw request access helpers
"""

from dataclasses import FrozenInstanceError

import pytest
from pydantic import BaseModel

from request_boundary.core.domain_types import AuthRequirement
from request_boundary.core.errors import ClientInputError, ConfigurationError
from request_boundary.core.facade import (
    BoundaryPolicy, RequestFacade, ensure_raw_request, is_real_request,
)
from request_boundary.core.raw_request import PayloadSettings
from tests.mocks import FIXED_UUID, FixedIdentityGenerator, create_raw_request


class Params(BaseModel):
    id: str


class Query(BaseModel):
    search: str


def _build(raw, *args, **kwargs) -> RequestFacade:
    kwargs.setdefault("generator", FixedIdentityGenerator())
    return RequestFacade.from_raw(raw, *args, **kwargs)


# ─── id / uuid ───────────────────────────────────────────────────

def test_id_uses_upstream_request_id():
    facade = _build(create_raw_request(app={"request_id": "fakeId"}))
    assert facade.id == "fakeId"
    assert facade.identity.id == "fakeId"


def test_id_generated_without_upstream_context():
    facade = _build(create_raw_request(app=None))
    assert facade.id == FIXED_UUID


def test_uuid_uses_upstream_request_uuid():
    facade = _build(create_raw_request(
        app={"request_uuid": "123e4567-e89b-12d3-a456-426614174000"},
    ))
    assert facade.uuid == "123e4567-e89b-12d3-a456-426614174000"


def test_uuid_generated_without_upstream_uuid():
    facade = _build(create_raw_request(app={}))
    assert facade.uuid == FIXED_UUID


def test_structurally_identical_requests_get_distinct_identity():
    first = RequestFacade.from_raw(create_raw_request(headers={"a": "1"}))
    second = RequestFacade.from_raw(create_raw_request(headers={"a": "1"}))
    assert first.id != second.id
    assert first.uuid != second.uuid


# ─── headers ─────────────────────────────────────────────────────

def test_headers_are_a_frozen_copy():
    raw_headers = {"custom": "one"}
    facade = _build(create_raw_request(headers=raw_headers))
    assert facade.headers == {"custom": "one"}
    assert facade.headers is not raw_headers
    with pytest.raises(TypeError):
        facade.headers["custom"] = "two"


def test_authorization_withheld_by_default():
    facade = _build(create_raw_request(headers={"custom": "one", "authorization": "token"}))
    assert facade.headers == {"custom": "one"}


def test_authorization_exposed_when_not_secured():
    facade = _build(
        create_raw_request(headers={"custom": "one", "authorization": "token"}),
        None,
        False,
    )
    assert facade.headers == {"custom": "one", "authorization": "token"}


def test_policy_controls_sensitive_headers():
    policy = BoundaryPolicy(sensitive_headers=("cookie",))
    facade = _build(
        create_raw_request(headers={"cookie": "sid=1", "authorization": "token"}),
        policy=policy,
    )
    assert facade.headers == {"authorization": "token"}


# ─── is_system_request ───────────────────────────────────────────

@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"custom": "one"}, False),
        ({"custom": "one", "osd-system-request": "true"}, True),
        ({"custom": "one", "osd-system-request": "false"}, False),
        ({"custom": "one", "osd-system-api": "true"}, True),
        ({"custom": "one", "osd-system-api": "false"}, False),
    ],
)
def test_is_system_request(headers, expected):
    assert _build(create_raw_request(headers=headers)).is_system_request is expected


def test_system_marker_still_detected_when_headers_filtered():
    facade = _build(create_raw_request(headers={"osd-system-request": "true"}),
                    policy=BoundaryPolicy(sensitive_headers=("osd-system-request",)))
    assert facade.is_system_request is True
    assert "osd-system-request" not in facade.headers


# ─── route.options.auth_required ─────────────────────────────────

@pytest.mark.parametrize(
    "auth, expected",
    [
        (None, AuthRequirement.REQUIRED),
        (False, AuthRequirement.DISABLED),
        ({"mode": "required"}, AuthRequirement.REQUIRED),
        ({"mode": "optional"}, AuthRequirement.OPTIONAL),
        ({"mode": "try"}, AuthRequirement.OPTIONAL),
    ],
)
def test_auth_required(auth, expected):
    facade = _build(create_raw_request(auth=auth))
    assert facade.route.options.auth_required is expected


def test_throws_on_auth_strategy_name():
    raw = create_raw_request(auth={"strategies": ["session"]})
    with pytest.raises(ConfigurationError) as exc_info:
        _build(raw)
    assert str(exc_info.value) == (
        'unexpected authentication options: {"strategies":["session"]} for route: /'
    )


def test_throws_on_unexpected_auth_mode():
    raw = create_raw_request(auth={"mode": None})
    with pytest.raises(ConfigurationError) as exc_info:
        _build(raw)
    assert str(exc_info.value) == "unexpected authentication options: {} for route: /"


def test_configuration_error_is_stamped_with_request_id():
    raw = create_raw_request(auth={"mode": "nope"}, app={"request_id": "req-1"})
    with pytest.raises(ConfigurationError) as exc_info:
        _build(raw)
    assert exc_info.value.context.request_id == "req-1"


def test_auth_failure_aborts_before_facet_validation():
    seen = []

    def track(data, result):
        seen.append(data)
        return result.ok(data)

    raw = create_raw_request(auth={"strategies": ["session"]})
    with pytest.raises(ConfigurationError):
        _build(raw, {"params": track})
    assert seen == []


# ─── params / query / body ───────────────────────────────────────

def test_works_with_schema_validators():
    body = b"body!"
    raw = create_raw_request(
        params={"id": "params"}, query={"search": "query"}, payload=body,
    )
    facade = _build(raw, {"params": Params, "query": Query, "body": bytes})
    assert facade.params.model_dump() == {"id": "params"}
    assert facade.params.id.upper() == "PARAMS"
    assert facade.query.model_dump() == {"search": "query"}
    assert facade.query.search.upper() == "QUERY"
    assert facade.body == body
    assert len(facade.body) > 0


def test_works_with_validation_function():
    body = b"body!"
    raw = create_raw_request(
        params={"id": "params"}, query={"search": "query"}, payload=body,
    )

    def body_validator(data, result):
        if isinstance(data, bytes):
            return result.ok(data)
        return result.bad_request("It should be bytes", [])

    facade = _build(raw, {"params": Params, "query": Query, "body": body_validator})
    assert facade.params.id.upper() == "PARAMS"
    assert facade.query.search.upper() == "QUERY"
    assert facade.body == body


def test_validation_function_rejects_non_bytes_body():
    raw = create_raw_request(payload={"not": "bytes"})

    def body_validator(data, result):
        if isinstance(data, bytes):
            return result.ok(data)
        return result.bad_request("It should be bytes", [])

    with pytest.raises(ClientInputError) as exc_info:
        _build(raw, {"body": body_validator})
    assert exc_info.value.facet == "body"
    assert exc_info.value.message == "It should be bytes"


def test_mismatched_params_raise_client_input_error():
    raw = create_raw_request(params={"identifier": "x"})
    with pytest.raises(ClientInputError) as exc_info:
        _build(raw, {"params": Params})
    assert exc_info.value.facet == "params"
    assert exc_info.value.context.request_id == FIXED_UUID


def test_unvalidated_facets_pass_through():
    raw = create_raw_request(params={"id": "1"}, query={"q": "x"}, payload=b"raw")
    facade = _build(raw)
    assert facade.params == {"id": "1"}
    assert facade.query == {"q": "x"}
    assert facade.body == b"raw"
    raw.params["id"] = "2"
    assert facade.params == {"id": "1"}


def test_pass_through_facets_cannot_be_mutated():
    facade = _build(create_raw_request(params={"id": "1"}, query={"tag": ["a", "b"]}))
    with pytest.raises(TypeError):
        facade.params["id"] = "2"
    assert facade.query["tag"] == ("a", "b")


def test_unknown_validation_facet_is_configuration_error():
    raw = create_raw_request(path="/api/x", app={"request_id": "req-1"})
    with pytest.raises(ConfigurationError) as exc_info:
        _build(raw, {"headers": dict})
    assert exc_info.value.message.endswith("for route: /api/x")
    assert exc_info.value.context.request_id == "req-1"


def test_raising_validation_function_is_client_input_error():
    raw = create_raw_request(payload={}, app={"request_id": "req-2"})
    with pytest.raises(ClientInputError) as exc_info:
        _build(raw, {"body": lambda data, result: result.ok(data["missing"])})
    assert exc_info.value.facet == "body"
    assert exc_info.value.context.request_id == "req-2"


# ─── route info / url / auth state ───────────────────────────────

def test_get_route_info():
    raw = create_raw_request(path="/api/items/{id}", method="GET", tags=["access:items"])
    route = _build(raw).route
    assert route.path == "/api/items/{id}"
    assert route.method == "get"
    assert route.options.xsrf_required is False
    assert route.options.tags == ("access:items",)
    assert route.options.body is None


def test_post_route_requires_xsrf_and_exposes_body_options():
    raw = create_raw_request(
        method="post", payload_settings=PayloadSettings(max_bytes=1024, output="stream"),
    )
    options = _build(raw).route.options
    assert options.xsrf_required is True
    assert options.body.max_bytes == 1024
    assert options.body.output == "stream"
    assert options.body.accepts == ("application/json",)


def test_route_can_opt_out_of_xsrf():
    raw = create_raw_request(method="put", xsrf_required=False)
    assert _build(raw).route.options.xsrf_required is False


def test_route_timeouts_default_to_none():
    timeout = _build(create_raw_request()).route.options.timeout
    assert timeout.payload is None
    assert timeout.idle_socket is None


def test_url_and_auth_state():
    raw = create_raw_request(url="http://localhost:5601/api/items?page=2", is_authenticated=True)
    facade = _build(raw)
    assert facade.url.path == "/api/items"
    assert facade.url.query == "page=2"
    assert facade.auth.is_authenticated is True


# ─── immutability / raw access ───────────────────────────────────

def test_facade_is_immutable():
    facade = _build(create_raw_request())
    with pytest.raises(FrozenInstanceError):
        facade.params = {"id": "other"}
    with pytest.raises(FrozenInstanceError):
        facade.route.options.auth_required = AuthRequirement.DISABLED


def test_ensure_raw_request_and_is_real_request():
    raw = create_raw_request()
    facade = _build(raw)
    assert ensure_raw_request(facade) is raw
    assert ensure_raw_request(raw) is raw
    assert is_real_request(raw) is True
    assert is_real_request(facade) is False
    with pytest.raises(TypeError):
        ensure_raw_request({"headers": {}})
