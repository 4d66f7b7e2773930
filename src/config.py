"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting environment variables into strongly-typed Pydantic models.
- Validating required fields and providing actionable error messages.
"""

import os
from typing import TypeVar

import dotenv
from pydantic import BaseModel, Field, field_validator

_T = TypeVar("_T", int, float)


def _is_placeholder(value: str) -> bool:
    """Return True for `.env` template values like `your_auth0_domain_here`."""
    return value.startswith("your_") and value.endswith("_here")


def _get_required_env(name: str) -> str:
    """Read a required env var or raise a helpful error."""
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"{name} is required. Please set it in your .env file.")
    if _is_placeholder(value):
        raise ValueError(f"{name} is required. Please replace the placeholder value in your .env file.")
    return value


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


class ManagementConfig(BaseModel):
    """Configuration for talking to the Management API."""

    domain: str = Field(..., description="Tenant domain, e.g. example.us.auth0.com")
    api_token: str = Field(..., description="Management API access token")

    # Optional tuning knobs
    rate_limit: int = Field(default=10, description="Max requests per second")
    max_attempt: int = Field(default=5, description="Max attempts per request")
    base_delay: float = Field(default=0.5, description="Initial retry delay (seconds)")
    backoff_multiplier: float = Field(default=2.0, description="Exponential backoff multiplier")
    max_delay: float = Field(default=30.0, description="Max total delay before failing (seconds)")
    timeout: float = Field(default=30.0, description="Per-request HTTP timeout (seconds)")

    @property
    def base_url(self) -> str:
        """Get the base URL for the Management API."""
        return f"https://{self.domain}/api/v2"

    @field_validator("domain")
    def validate_domain(cls, v: str) -> str:
        """Validate the domain is set and strip any scheme/trailing slash."""
        v = v.strip()
        if not v or _is_placeholder(v):
            raise ValueError("AUTH0_DOMAIN is required. Please set it in your .env file.")
        for scheme in ("https://", "http://"):
            if v.startswith(scheme):
                v = v[len(scheme):]
        return v.rstrip("/")

    @field_validator("api_token")
    def validate_api_token(cls, v: str) -> str:
        """Validate the api token is set (not empty/placeholder)."""
        if not v or _is_placeholder(v):
            raise ValueError("AUTH0_API_TOKEN is required. Please set it in your .env file.")
        return v


class Config(BaseModel):
    """Top-level application configuration."""

    management: ManagementConfig = Field(..., description="Management API configuration")


def load_config() -> Config:
    """Load application configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with actionable messages when required configuration is
      missing or still contains placeholder values.
    """
    dotenv.load_dotenv()

    management = ManagementConfig(
        domain=_get_required_env("AUTH0_DOMAIN"),
        api_token=_get_required_env("AUTH0_API_TOKEN"),
        rate_limit=_get_env_number("AUTH0_RATE_LIMIT", 10, int),
        max_attempt=_get_env_number("AUTH0_MAX_ATTEMPT", 5, int),
        base_delay=_get_env_number("AUTH0_BASE_DELAY", 0.5, float),
        backoff_multiplier=_get_env_number("AUTH0_BACKOFF_MULTIPLIER", 2.0, float),
        max_delay=_get_env_number("AUTH0_MAX_DELAY", 30.0, float),
        timeout=_get_env_number("AUTH0_TIMEOUT", 30.0, float),
    )
    return Config(management=management)
