"""Async request executor for the Management API.

This client implements a small async utility framework:

- `request()` creates an `asyncio.Future`, enqueues `(method, path, body, future)`,
  and awaits the future's result.
- A single background worker consumes the queue serially.
- A token-bucket limiter gates outbound requests.

The HTTP call uses `requests` executed in a thread. Resource managers such as
`LogStreamManager` only build paths and bodies; transport, auth and retries
live here.
"""

from __future__ import annotations

import asyncio
import random
import time
import uuid
from contextlib import suppress
from typing import Any
from urllib.parse import quote, urlencode

import requests #type: ignore

from config import ManagementConfig
from observability.recorder import ObservabilityRecorder

from .rate_limit import TokenBucketRateLimiter

USER_AGENT = "logstream-management/0.1.0"

# Verbs whose repeated application leaves the server in the same state.
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


class ManagementClient:
    """Bearer-token authenticated async client for the Management API.

    Members:
    - Config: `config`
    - Base URL: `base_url` (computed from the tenant domain)
    - Request Queue: `request_queue` (single asyncio.Queue)
    - Dedicated Worker Task: `_request_worker_task` (single background task)
    - Rate Limiter: `rate_limiter` (token bucket)
    - Recorder: `recorder` (optional, records every call)
    """

    def __init__(self, config: ManagementConfig, *, recorder: ObservabilityRecorder | None = None):
        """Create a client using the given credentials and tuning configuration."""
        self.config = config
        self.base_url: str = config.base_url
        self.recorder = recorder

        # Central request queue: (method, path, body, future)
        self.request_queue: asyncio.Queue[tuple[str, str, Any | None, asyncio.Future[Any]]] = asyncio.Queue()

        self.rate_limiter = TokenBucketRateLimiter(rate=config.rate_limit)
        self._request_worker_task: asyncio.Task[None] | None = None

    def uri(self, *segments: str) -> str:
        """Join path segments into an API path, quoting each one.

        `uri("log-streams", "lst_0/1")` -> `/log-streams/lst_0%2F1`
        """
        return "/" + "/".join(quote(str(s), safe="") for s in segments)

    async def request(
        self,
        method: str,
        path: str,
        body: Any | None = None,
        *,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON response (or None).

        `params` become the query string; `None` values are dropped.
        """
        return await self._enqueue_request(method.upper(), path + self._build_query_string(params or {}), body)

    async def aclose(self) -> None:
        """Stop the background worker. Safe to call multiple times."""
        task = self._request_worker_task
        self._request_worker_task = None
        if task is None or task.done():
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    def _ensure_worker_started(self) -> None:
        """Start the single background worker task (lazily)."""
        if self._request_worker_task is not None and not self._request_worker_task.done():
            return
        loop = asyncio.get_running_loop()
        self._request_worker_task = loop.create_task(self._request_worker(), name="management-request-worker")

    async def _enqueue_request(self, method: str, path: str, body: Any | None) -> Any:
        """Enqueue a request and await its result."""
        self._ensure_worker_started()
        fut: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        await self.request_queue.put((method, path, body, fut))
        return await fut

    async def _request_worker(self) -> None:
        """Consume the queue serially, resolve futures with results/errors."""
        while True:
            method, path, body, fut = await self.request_queue.get()
            try:
                result = await self._send_recorded(method, path, body)
            except Exception as exc:  # noqa: BLE001 - propagate into awaiting task
                if not fut.cancelled():
                    fut.set_exception(exc)
            else:
                if not fut.cancelled():
                    fut.set_result(result)
            finally:
                self.request_queue.task_done()

    async def _send_recorded(self, method: str, path: str, body: Any | None) -> Any:
        """Send with retries, recording request/response/error when a recorder is set."""
        if self.recorder is None:
            return await self._send_with_retries(method, path, body)

        correlation_id = uuid.uuid4().hex
        await self.recorder.record_call(
            kind="request", method=method, path=path, payload=body, correlation_id=correlation_id
        )
        try:
            result = await self._send_with_retries(method, path, body)
        except ManagementHttpError as exc:
            await self.recorder.record_call(
                kind="error",
                method=method,
                path=path,
                status_code=exc.status_code,
                payload=exc.payload,
                correlation_id=correlation_id,
            )
            raise
        except Exception as exc:
            await self.recorder.record_call(
                kind="error",
                method=method,
                path=path,
                payload={"error": repr(exc)},
                correlation_id=correlation_id,
            )
            raise
        await self.recorder.record_call(
            kind="response", method=method, path=path, payload=result, correlation_id=correlation_id
        )
        return result

    def _headers(self) -> dict[str, str]:
        """Build the per-request headers (auth + JSON content negotiation)."""
        return {
            "Authorization": f"Bearer {self.config.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    async def _send_request(self, method: str, path: str, body: Any | None) -> Any:
        """Send a single request, returning the decoded JSON response.

        Raises:
        - `ManagementHttpError` for non-2xx responses
        - `requests.RequestException` for transport errors
        """
        headers = self._headers()
        url = self.base_url + path

        def _do_request() -> Any:
            """Execute the HTTP request synchronously (runs in a worker thread)."""
            resp = requests.request(method, url, headers=headers, json=body, timeout=self.config.timeout)
            if 200 <= resp.status_code < 300:
                if not resp.content:
                    return None
                return resp.json()

            error_payload: dict[str, Any] | None
            try:
                error_payload = resp.json()
            except Exception:  # noqa: BLE001 - best-effort parsing
                error_payload = None
            raise ManagementHttpError(status_code=resp.status_code, payload=error_payload)

        return await asyncio.to_thread(_do_request)

    async def _send_with_retries(self, method: str, path: str, body: Any | None) -> Any:
        """Send a request, backing off between attempts while the failure is retryable.

        What counts as retryable depends on the verb (see `_is_retryable_error`).
        Gives up after `max_attempt` sends, or once the next backoff would push
        the total elapsed time past `max_delay`.
        """
        attempt = 0
        started_at = time.monotonic()

        while True:
            attempt += 1
            await self.rate_limiter.acquire()
            try:
                return await self._send_request(method, path, body)
            except Exception as exc:  # noqa: BLE001 - classified below
                if attempt >= self.config.max_attempt or not _is_retryable_error(exc, method):
                    raise
                backoff = self.config.base_delay * self.config.backoff_multiplier ** (attempt - 1)
                backoff += random.uniform(0.0, backoff * 0.1)
                if time.monotonic() - started_at + backoff > self.config.max_delay:
                    raise
            await asyncio.sleep(backoff)

    def _build_query_string(self, params: dict[str, Any]) -> str:
        """Encode request options as a query string; `None` values are dropped.

        Sequences (e.g. `fields`) are comma-joined and booleans become
        "true"/"false", which is how the API spells them.
        """

        def _encode(value: Any) -> str:
            if isinstance(value, bool):
                return "true" if value else "false"
            if isinstance(value, (list, tuple)):
                return ",".join(map(str, value))
            return str(value)

        query = {key: _encode(value) for key, value in params.items() if value is not None}
        return "?" + urlencode(query) if query else ""


class ManagementHttpError(RuntimeError):
    """HTTP-level error returned by the Management API."""

    def __init__(self, *, status_code: int, payload: dict[str, Any] | None):
        """Create an error capturing HTTP status code and parsed payload (if any)."""
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"Management API HTTP {status_code}: {payload}")

    @property
    def message(self) -> str | None:
        """The API's human-readable `message`, when the payload carries one."""
        if isinstance(self.payload, dict):
            message = self.payload.get("message")
            if isinstance(message, str):
                return message
        return None


def _is_retryable_error(exc: BaseException, method: str) -> bool:
    """Return True if resending `method` after `exc` cannot apply the request twice.

    - 429 and `ConnectTimeout`: the request was never processed, so any verb is retried.
    - 5xx and other transport errors (read timeouts, dropped connections): the
      server may already have acted, so only idempotent verbs are retried. A
      resent POST would create a duplicate log stream.
    """
    if isinstance(exc, ManagementHttpError):
        if exc.status_code == 429:
            return True
        return exc.status_code >= 500 and method.upper() in IDEMPOTENT_METHODS

    if isinstance(exc, requests.ConnectTimeout):
        return True
    return isinstance(exc, requests.RequestException) and method.upper() in IDEMPOTENT_METHODS
