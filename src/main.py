"""Demo entrypoint wiring together the Management API client components.

This module contains a small, end-to-end "smoke test" that:

- Loads configuration from environment.
- Instantiates the Management client with a DuckDB-backed recorder.
- Lists the tenant's log streams and prints a one-line summary per stream.

It is **not** intended to be production tooling; it is a convenient manual
integration harness.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from config import load_config
from management import LogStream, LogStreamManager, LogStreamSink, ManagementClient
from observability import DuckDBObservabilitySink, ObservabilityRecorder


def _describe(stream: LogStream) -> str:
    """Render a log stream as a single printable line."""
    if isinstance(stream.sink, LogStreamSink):
        sink = type(stream.sink).__name__
    elif stream.sink is not None:
        sink = f"raw({', '.join(sorted(stream.sink))})"
    else:
        sink = "-"
    return f"{stream.id or '?'}  {stream.type or '?':<12} {stream.status or '?':<10} {stream.name or ''}  sink={sink}"


async def main() -> None:
    config = load_config()

    db_path = Path(os.getenv("OBSERVABILITY_DB_PATH", "observability.duckdb"))
    recorder = ObservabilityRecorder(sink=DuckDBObservabilitySink(path=db_path))

    client = ManagementClient(config.management, recorder=recorder)
    log_streams = LogStreamManager(client)
    try:
        streams = await log_streams.list()
        print(f"[log-streams] {len(streams)} found on {config.management.domain}")
        for stream in streams:
            print(f"[log-stream] {_describe(stream)}")
    finally:
        await client.aclose()
        await recorder.aclose()


if __name__ == "__main__":
    asyncio.run(main())
