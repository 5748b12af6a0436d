"""Boundary Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - Defaults keep the boundary secure: sensitive headers withheld unless a
      route explicitly opts out

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Env vars prefixed REQUEST_BOUNDARY_ so they cannot collide with the host app
    - to_policy() hands core a plain frozen dataclass (core never imports config)
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from request_boundary.core.facade import BoundaryPolicy


class Settings(BaseSettings):
    """Boundary settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="REQUEST_BOUNDARY_",
        case_sensitive=False, extra="ignore",
    )

    # Header policy
    secured_by_default: bool = True
    sensitive_headers: list[str] = ["authorization"]

    # System request markers
    system_request_header: str = "osd-system-request"
    legacy_system_request_header: str = "osd-system-api"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator(
        "sensitive_headers", mode="after",
    )
    @classmethod
    def lowercase_headers(cls, v: list[str]) -> list[str]:
        return [name.strip().lower() for name in v if name.strip()]

    def to_policy(self) -> BoundaryPolicy:
        return BoundaryPolicy(
            sensitive_headers=tuple(self.sensitive_headers),
            system_request_header=self.system_request_header,
            legacy_system_request_header=self.legacy_system_request_header,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
