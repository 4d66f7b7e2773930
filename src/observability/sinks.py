"""Observability sinks (storage backends)."""

from __future__ import annotations

import json
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import duckdb

from .models import ObservabilityRecord


class ObservabilitySink(Protocol):
    """A synchronous sink for observability records.

    Sinks are synchronous because the recorder runs them in a worker thread.
    """

    def write(self, record: ObservabilityRecord) -> None:
        """Persist a single record."""

    def close(self) -> None:
        """Close any underlying resources."""


class InMemoryObservabilitySink:
    """In-memory sink for tests and local debugging."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[ObservabilityRecord] = []

    def write(self, record: ObservabilityRecord) -> None:
        """Append a record to the in-memory list (thread-safe)."""
        with self._lock:
            self._records.append(record)

    def close(self) -> None:  # noqa: D401 - keep interface consistent
        """No-op."""

    def snapshot(self) -> Sequence[ObservabilityRecord]:
        """Return a point-in-time copy of all recorded entries."""
        with self._lock:
            return list(self._records)


@dataclass(frozen=True)
class DuckDBOptions:
    path: Path
    table: str = "api_calls"


class DuckDBObservabilitySink:
    """DuckDB sink for durable local persistence of API call records."""

    def __init__(self, *, path: str | Path, table: str = "api_calls") -> None:
        """Create (or open) a DuckDB-backed sink at the given path."""
        self._opts = DuckDBOptions(path=Path(path), table=table)
        self._lock = threading.Lock()
        self._conn = duckdb.connect(str(self._opts.path))
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create the backing table if it does not exist yet."""
        create_sql = f"""
        create table if not exists {self._opts.table} (
          logged_at timestamptz not null,
          occurred_at timestamptz not null,
          kind varchar not null,
          method varchar not null,
          path varchar not null,
          status_code integer,
          correlation_id varchar,
          summary_json varchar not null
        )
        """
        with self._lock:
            self._conn.execute(create_sql)

    def write(self, record: ObservabilityRecord) -> None:
        """Insert a single record; the summary is stored as stable JSON."""
        summary_json = json.dumps(record.summary, separators=(",", ":"), sort_keys=True, default=str)
        insert_sql = f"""
        insert into {self._opts.table}
        (logged_at, occurred_at, kind, method, path, status_code, correlation_id, summary_json)
        values (?, ?, ?, ?, ?, ?, ?, ?)
        """
        with self._lock:
            self._conn.execute(
                insert_sql,
                [
                    record.logged_at,
                    record.occurred_at,
                    record.kind,
                    record.method,
                    record.path,
                    record.status_code,
                    record.correlation_id,
                    summary_json,
                ],
            )

    def count(self) -> int:
        """Return the number of stored records."""
        with self._lock:
            row = self._conn.execute(f"select count(*) from {self._opts.table}").fetchone()
        return int(row[0]) if row else 0

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        with self._lock:
            self._conn.close()
