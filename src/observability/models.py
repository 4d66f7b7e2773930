"""Observability record models.

Records are designed to be:
- Durable and append-only (sink decides storage).
- Easy to link across a single API call via a correlation identifier.
- Safe by default (store redacted summaries, never credentials).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


RecordKind = Literal["request", "response", "error"]


class ObservabilityRecord(BaseModel):
    """A durable, structured record of one step of a Management API call."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    kind: RecordKind

    # HTTP verb and API path (including any query string).
    method: str
    path: str

    # Only set for error records raised from an HTTP response.
    status_code: int | None = None

    # Shared by the request record and its response/error record.
    correlation_id: str | None = None

    occurred_at: datetime = Field(default_factory=utc_now)
    logged_at: datetime = Field(default_factory=utc_now)

    # Redacted body summary.
    summary: dict[str, Any] = Field(default_factory=dict)
