"""Root conftest — shared test configuration."""

import pytest

from request_boundary.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are lru_cached; env changes in one test must not leak into the next."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
