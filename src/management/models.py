"""Log stream models used by `LogStreamManager`.

A log stream exports tenant log events to an external analysis service. The
wire envelope is shared by every destination; the shape of its `sink` object
depends on the sibling `type` field:

- `type` is one of `SINK_TYPES`: `sink` is validated into that variant.
- `type` is missing or unrecognized: `sink` is kept as a plain dict so that
  destinations added to the API later still decode without loss.

See: https://auth0.com/docs/customize/log-streams
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticSerializationError

LOG_STREAM_TYPE_AMAZON_EVENTBRIDGE = "eventbridge"
LOG_STREAM_TYPE_AZURE_EVENTGRID = "eventgrid"
LOG_STREAM_TYPE_HTTP = "http"
LOG_STREAM_TYPE_DATADOG = "datadog"
LOG_STREAM_TYPE_SPLUNK = "splunk"
LOG_STREAM_TYPE_SUMO = "sumo"

LogStreamType = Literal["eventbridge", "eventgrid", "http", "datadog", "splunk", "sumo"]
LogStreamStatus = Literal["active", "paused", "suspended"]


class SerializationError(ValueError):
    """A log stream (or its sink) could not be converted to JSON."""


class DeserializationError(ValueError):
    """A payload could not be decoded into a log stream."""


class _Model(BaseModel):
    # Wire names are camelCase aliases; keyword construction uses field names.
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    def to_api(self) -> dict[str, Any]:
        """Dump to the wire shape, omitting unset (None) fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LogStreamSink(_Model):
    """Base class for the destination-specific sink payloads."""

    type_name: ClassVar[str]


class LogStreamSinkAmazonEventBridge(LogStreamSink):
    """Export logs to Amazon EventBridge."""

    type_name: ClassVar[str] = LOG_STREAM_TYPE_AMAZON_EVENTBRIDGE

    account_id: str | None = Field(default=None, alias="awsAccountId")
    region: str | None = Field(default=None, alias="awsRegion")
    # Assigned by the API once the stream is created.
    partner_event_source: str | None = Field(default=None, alias="awsPartnerEventSource")


class LogStreamSinkAzureEventGrid(LogStreamSink):
    """Export logs to Azure Event Grid."""

    type_name: ClassVar[str] = LOG_STREAM_TYPE_AZURE_EVENTGRID

    subscription_id: str | None = Field(default=None, alias="azureSubscriptionId")
    resource_group: str | None = Field(default=None, alias="azureResourceGroup")
    region: str | None = Field(default=None, alias="azureRegion")
    partner_topic: str | None = Field(default=None, alias="azurePartnerTopic")


class LogStreamSinkHTTPCustomHeader(_Model):
    """Single `{header, value}` pair sent with every webhook delivery."""

    header: str | None = None
    value: str | None = None


class LogStreamSinkHTTP(LogStreamSink):
    """Export logs to a custom webhook."""

    type_name: ClassVar[str] = LOG_STREAM_TYPE_HTTP

    content_format: str | None = Field(default=None, alias="httpContentFormat")
    content_type: str | None = Field(default=None, alias="httpContentType")
    endpoint: str | None = Field(default=None, alias="httpEndpoint")
    authorization: str | None = Field(default=None, alias="httpAuthorization")
    # Order is significant and preserved on both decode and encode.
    custom_headers: list[LogStreamSinkHTTPCustomHeader] | None = Field(default=None, alias="httpCustomHeaders")


class LogStreamSinkDatadog(LogStreamSink):
    """Export logs to Datadog."""

    type_name: ClassVar[str] = LOG_STREAM_TYPE_DATADOG

    region: str | None = Field(default=None, alias="datadogRegion")
    api_key: str | None = Field(default=None, alias="datadogApiKey")


class LogStreamSinkSplunk(LogStreamSink):
    """Export logs to Splunk."""

    type_name: ClassVar[str] = LOG_STREAM_TYPE_SPLUNK

    domain: str | None = Field(default=None, alias="splunkDomain")
    token: str | None = Field(default=None, alias="splunkToken")
    # The API models the port as a string.
    port: str | None = Field(default=None, alias="splunkPort")
    secure: StrictBool | None = Field(default=None, alias="splunkSecure")


class LogStreamSinkSumo(LogStreamSink):
    """Export logs to Sumo Logic."""

    type_name: ClassVar[str] = LOG_STREAM_TYPE_SUMO

    source_address: str | None = Field(default=None, alias="sumoSourceAddress")


SINK_TYPES: dict[str, type[LogStreamSink]] = {
    cls.type_name: cls
    for cls in (
        LogStreamSinkAmazonEventBridge,
        LogStreamSinkAzureEventGrid,
        LogStreamSinkHTTP,
        LogStreamSinkDatadog,
        LogStreamSinkSplunk,
        LogStreamSinkSumo,
    )
}

# Either a known variant or the raw mapping for unrecognized types.
Sink = Union[LogStreamSink, dict[str, Any]]


def _encode_sink(sink: Any) -> Any:
    """Serialize a sink on its own, independently of the envelope."""
    try:
        if isinstance(sink, LogStreamSink):
            return sink.to_api()
        # Round-trip so non-JSON values fail here rather than at send time.
        return json.loads(json.dumps(sink, allow_nan=False))
    except (TypeError, ValueError, PydanticSerializationError) as exc:
        raise SerializationError(f"log stream sink is not JSON serializable: {exc}") from exc


class LogStream(_Model):
    """A log stream record as exposed by `/api/v2/log-streams`."""

    id: str | None = None
    # Alphanumerics, spaces and '-'; cannot start or end with '-' or a space.
    name: str | None = None
    type: LogStreamType | str | None = None
    status: LogStreamStatus | str | None = None
    sink: Any = None

    @field_validator("sink", mode="before")
    @classmethod
    def _resolve_sink(cls, v: Any, info: ValidationInfo) -> Sink | None:
        """Pick the sink shape from the already-validated `type` field."""
        if v is None:
            return None

        stream_type = info.data.get("type")
        sink_cls = SINK_TYPES.get(stream_type) if isinstance(stream_type, str) else None

        if isinstance(v, LogStreamSink):
            # A typed sink with no `type` is allowed (e.g. a sink-only update).
            if isinstance(stream_type, str) and v.type_name != stream_type:
                raise ValueError(f"{type(v).__name__} does not match log stream type {stream_type!r}")
            return v
        if sink_cls is not None:
            return sink_cls.model_validate(v)
        if not isinstance(v, Mapping):
            raise ValueError("sink must be a JSON object")
        return dict(v)

    def to_api(self) -> dict[str, Any]:
        """Encode into the wire envelope.

        Unset scalars are omitted and an unset sink drops the `sink` key
        entirely. Raises `SerializationError` if the sink holds values that
        cannot be represented as JSON.
        """
        body = self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"sink"})
        if self.sink is not None:
            body["sink"] = _encode_sink(self.sink)
        return body

    def to_json(self) -> str:
        """Encode into a compact JSON document."""
        return json.dumps(self.to_api(), separators=(",", ":"))

    @classmethod
    def from_api(cls, payload: Any) -> "LogStream":
        """Parse a log stream payload from the Management API."""
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise DeserializationError(f"invalid log stream payload: {exc}") from exc

    @classmethod
    def from_json(cls, raw: str | bytes) -> "LogStream":
        """Parse a raw JSON document into a log stream."""
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            raise DeserializationError(f"invalid log stream JSON: {exc}") from exc
