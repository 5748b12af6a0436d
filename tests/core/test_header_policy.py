"""Header Policy — frozen, filtered header copies.

Tests cover:
    - result is a distinct, read-only mapping
    - secured=True withholds authorization (any case), secured=False exposes it
    - list values are frozen into tuples
    - custom sensitive header sets
"""

import pytest

from request_boundary.core.header_policy import filter_headers


def test_provides_frozen_copy_of_headers():
    raw_headers = {"custom": "one"}
    headers = filter_headers(raw_headers, secured=True)
    assert headers == {"custom": "one"}
    assert headers is not raw_headers
    with pytest.raises(TypeError):
        headers["custom"] = "two"
    with pytest.raises(TypeError):
        del headers["custom"]


def test_later_changes_to_raw_headers_do_not_leak_in():
    raw_headers = {"custom": "one"}
    headers = filter_headers(raw_headers, secured=True)
    raw_headers["custom"] = "changed"
    raw_headers["added"] = "late"
    assert headers == {"custom": "one"}


def test_withholds_authorization_when_secured():
    headers = filter_headers({"custom": "one", "authorization": "token"}, secured=True)
    assert headers == {"custom": "one"}


def test_withholds_authorization_regardless_of_case():
    headers = filter_headers({"Authorization": "token", "x-a": "1"}, secured=True)
    assert "Authorization" not in headers


def test_exposes_authorization_when_not_secured():
    headers = filter_headers({"custom": "one", "authorization": "token"}, secured=False)
    assert headers == {"custom": "one", "authorization": "token"}


def test_preserves_header_name_case():
    headers = filter_headers({"X-Custom": "one"}, secured=False)
    assert list(headers) == ["X-Custom"]


def test_list_values_become_tuples():
    raw_headers = {"x-forwarded-for": ["10.0.0.1", "10.0.0.2"]}
    headers = filter_headers(raw_headers, secured=True)
    assert headers["x-forwarded-for"] == ("10.0.0.1", "10.0.0.2")
    raw_headers["x-forwarded-for"].append("10.0.0.3")
    assert len(headers["x-forwarded-for"]) == 2


def test_custom_sensitive_headers():
    headers = filter_headers(
        {"cookie": "sid=1", "authorization": "token", "custom": "one"},
        secured=True,
        sensitive_headers=("Cookie",),
    )
    assert headers == {"authorization": "token", "custom": "one"}
