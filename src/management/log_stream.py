"""Log stream resource manager.

Each operation is a single call to `ManagementClient.request`; errors raised by
the client (`ManagementHttpError`, transport errors) propagate unchanged.
"""

from __future__ import annotations

from typing import Any

from .client import ManagementClient
from .models import LogStream

COLLECTION = "log-streams"


class LogStreamManager:
    """Manages log stream resources.

    See: https://auth0.com/docs/api/management/v2#!/log-streams
    """

    def __init__(self, client: ManagementClient):
        self._client = client

    async def create(self, log_stream: LogStream, *, params: dict[str, Any] | None = None) -> None:
        """Create a log stream."""
        await self._client.request("POST", self._client.uri(COLLECTION), log_stream.to_api(), params=params)

    async def read(self, id: str, *, params: dict[str, Any] | None = None) -> LogStream:
        """Read a log stream by id."""
        response = await self._client.request("GET", self._client.uri(COLLECTION, id), params=params)
        return LogStream.from_api(response)

    async def list(self, *, params: dict[str, Any] | None = None) -> list[LogStream]:
        """List all log streams, in the order the API returns them."""
        response = await self._client.request("GET", self._client.uri(COLLECTION), params=params)
        return [LogStream.from_api(item) for item in response or []]

    async def update(self, id: str, log_stream: LogStream, *, params: dict[str, Any] | None = None) -> None:
        """Update a log stream.

        Only `name`, `status` and `sink` may be changed. The API refuses sink
        updates for `eventbridge` and `eventgrid` streams.
        """
        await self._client.request("PATCH", self._client.uri(COLLECTION, id), log_stream.to_api(), params=params)

    async def delete(self, id: str, *, params: dict[str, Any] | None = None) -> None:
        """Delete a log stream."""
        await self._client.request("DELETE", self._client.uri(COLLECTION, id), params=params)
