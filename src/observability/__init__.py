"""Observability primitives.

This package provides a minimal, modular foundation for:
- Recording Management API calls (request, response, error) as durable records.
- Redacting credentials and sink secrets before anything is stored.
- Persisting records to a sink (in memory or DuckDB) without blocking the event loop.
"""

from .models import ObservabilityRecord
from .recorder import ObservabilityRecorder
from .sinks import DuckDBObservabilitySink, InMemoryObservabilitySink, ObservabilitySink

__all__ = [
    "DuckDBObservabilitySink",
    "InMemoryObservabilitySink",
    "ObservabilityRecord",
    "ObservabilityRecorder",
    "ObservabilitySink",
]
