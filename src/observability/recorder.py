"""Async recorder that writes observability records without blocking the event loop."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

from .models import ObservabilityRecord, RecordKind, utc_now
from .sinks import ObservabilitySink

REDACTED = "[REDACTED]"

# Compared case-insensitively. Covers sink secrets as well as generic credentials.
SECRET_KEYS = frozenset(
    {
        "api_key",
        "apikey",
        "authorization",
        "client_secret",
        "datadogapikey",
        "httpauthorization",
        "password",
        "secret",
        "splunktoken",
        "token",
    }
)


def _redact(value: Any) -> Any:
    """Return a copy of `value` with secret-looking keys replaced, at any depth."""
    if isinstance(value, dict):
        return {
            k: REDACTED if isinstance(k, str) and k.lower() in SECRET_KEYS else _redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_redact(v) for v in value]
    return value


def _extract_summary(payload: Any) -> dict[str, Any]:
    """Build a small, safe-to-store summary of a request or response body.

    Objects are kept (redacted); lists are reduced to their length so a large
    collection listing doesn't bloat storage.
    """
    if payload is None:
        return {}
    if hasattr(payload, "model_dump"):
        payload = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(payload, dict):
        return _redact(payload)
    if isinstance(payload, list):
        return {"items": len(payload)}
    return {"repr": repr(payload)}


class ObservabilityRecorder:
    """Queues records and writes them in a background task."""

    def __init__(self, *, sink: ObservabilitySink, max_queue_size: int = 10000) -> None:
        """Create a recorder backed by a synchronous sink.

        Args:
            sink: Storage backend used by the background writer.
            max_queue_size: Bound for in-memory buffering; records may be dropped
                when full so API calls are never blocked by storage.
        """
        self._sink = sink
        self._queue: asyncio.Queue[ObservabilityRecord | None] = asyncio.Queue(maxsize=max_queue_size)
        self._worker: asyncio.Task[None] | None = None
        self._closed = False

        self._write_failures = 0
        self._first_failure_at: datetime | None = None
        self._last_failure_at: datetime | None = None

    def _ensure_started(self) -> None:
        """Start the background writer task if it hasn't been started yet."""
        if self._worker is not None:
            return
        self._worker = asyncio.create_task(self._run_worker(), name="observability-writer")

    def _note_failure(self) -> None:
        now = utc_now()
        self._write_failures += 1
        self._first_failure_at = self._first_failure_at or now
        self._last_failure_at = now

    async def record_call(
        self,
        *,
        kind: RecordKind,
        method: str,
        path: str,
        payload: Any = None,
        status_code: int | None = None,
        correlation_id: str | None = None,
    ) -> None:
        """Record one step of an API call by enqueueing a record (non-blocking)."""
        if self._closed:
            return

        self._ensure_started()

        now = utc_now()
        record = ObservabilityRecord(
            kind=kind,
            method=method,
            path=path,
            status_code=status_code,
            correlation_id=correlation_id,
            occurred_at=now,
            logged_at=now,
            summary=_extract_summary(payload),
        )

        try:
            self._queue.put_nowait(record)
        except asyncio.QueueFull:
            self._note_failure()

    async def aclose(self) -> None:
        """Flush and close the recorder.

        Safe to call multiple times.
        """
        if self._closed:
            return
        self._closed = True
        if self._worker is not None:
            await self._queue.put(None)
            await self._worker
        await asyncio.to_thread(self._sink.close)

    async def _run_worker(self) -> None:
        """Background loop that drains the queue and writes to the sink."""
        while True:
            item = await self._queue.get()
            try:
                if item is None:
                    return
                await asyncio.to_thread(self._sink.write, item)
            except Exception:  # noqa: BLE001 - recording must not fail API calls
                self._note_failure()
            finally:
                self._queue.task_done()

    def degraded_status(self) -> dict[str, Any]:
        """Return a minimal degraded-status snapshot."""
        return {
            "write_failures": self._write_failures,
            "first_failure_at": self._first_failure_at,
            "last_failure_at": self._last_failure_at,
        }
