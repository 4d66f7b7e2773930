"""Typed client for the Management API log streams collection.

- `ManagementClient` executes requests (auth, rate limiting, retries).
- `LogStreamManager` exposes create/read/list/update/delete for log streams.
- `LogStream` and the `LogStreamSink*` variants encode/decode the wire format.
"""

from .client import ManagementClient, ManagementHttpError
from .log_stream import LogStreamManager
from .models import (
    LOG_STREAM_TYPE_AMAZON_EVENTBRIDGE,
    LOG_STREAM_TYPE_AZURE_EVENTGRID,
    LOG_STREAM_TYPE_DATADOG,
    LOG_STREAM_TYPE_HTTP,
    LOG_STREAM_TYPE_SPLUNK,
    LOG_STREAM_TYPE_SUMO,
    SINK_TYPES,
    DeserializationError,
    LogStream,
    LogStreamSink,
    LogStreamSinkAmazonEventBridge,
    LogStreamSinkAzureEventGrid,
    LogStreamSinkDatadog,
    LogStreamSinkHTTP,
    LogStreamSinkHTTPCustomHeader,
    LogStreamSinkSplunk,
    LogStreamSinkSumo,
    SerializationError,
)

__all__ = [
    "DeserializationError",
    "LOG_STREAM_TYPE_AMAZON_EVENTBRIDGE",
    "LOG_STREAM_TYPE_AZURE_EVENTGRID",
    "LOG_STREAM_TYPE_DATADOG",
    "LOG_STREAM_TYPE_HTTP",
    "LOG_STREAM_TYPE_SPLUNK",
    "LOG_STREAM_TYPE_SUMO",
    "LogStream",
    "LogStreamManager",
    "LogStreamSink",
    "LogStreamSinkAmazonEventBridge",
    "LogStreamSinkAzureEventGrid",
    "LogStreamSinkDatadog",
    "LogStreamSinkHTTP",
    "LogStreamSinkHTTPCustomHeader",
    "LogStreamSinkSplunk",
    "LogStreamSinkSumo",
    "ManagementClient",
    "ManagementHttpError",
    "SINK_TYPES",
    "SerializationError",
]
