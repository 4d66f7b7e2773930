from __future__ import annotations

import json
from datetime import datetime
from typing import Any

import pytest
from pydantic import ValidationError

from management.models import (
    SINK_TYPES,
    DeserializationError,
    LogStream,
    LogStreamSinkAmazonEventBridge,
    LogStreamSinkAzureEventGrid,
    LogStreamSinkDatadog,
    LogStreamSinkHTTP,
    LogStreamSinkHTTPCustomHeader,
    LogStreamSinkSplunk,
    LogStreamSinkSumo,
    SerializationError,
)

_WIRE_BY_TYPE: dict[str, dict[str, Any]] = {
    "eventbridge": {
        "id": "lst_0000000000000001",
        "name": "EventBridge",
        "type": "eventbridge",
        "status": "active",
        "sink": {
            "awsAccountId": "999999999999",
            "awsRegion": "us-west-2",
            "awsPartnerEventSource": "aws.partner/auth0.com/tenant-abc/auth0.logs",
        },
    },
    "eventgrid": {
        "id": "lst_0000000000000002",
        "name": "EventGrid",
        "type": "eventgrid",
        "status": "paused",
        "sink": {
            "azureSubscriptionId": "b69a6835-57c7-4d53-b0d5-1c6ae580b6d5",
            "azureResourceGroup": "azure-logs-rg",
            "azureRegion": "northeurope",
            "azurePartnerTopic": "auth0-log-stream-tenant-abc",
        },
    },
    "http": {
        "id": "lst_0000000000000003",
        "name": "Webhook",
        "type": "http",
        "status": "active",
        "sink": {
            "httpContentFormat": "JSONLINES",
            "httpContentType": "application/json",
            "httpEndpoint": "https://logs.example.com/ingest",
            "httpAuthorization": "Bearer abc",
            "httpCustomHeaders": [{"header": "X-Tenant", "value": "abc"}],
        },
    },
    "datadog": {
        "id": "lst_0000000000000004",
        "name": "Datadog",
        "type": "datadog",
        "status": "active",
        "sink": {"datadogRegion": "us", "datadogApiKey": "121233123455"},
    },
    "splunk": {
        "id": "lst_0000000000000005",
        "name": "Splunk",
        "type": "splunk",
        "status": "suspended",
        "sink": {
            "splunkDomain": "demo.splunk.com",
            "splunkToken": "12a34ab5-c6d7-8901-23ef-456b7c89d0c1",
            "splunkPort": "8088",
            "splunkSecure": True,
        },
    },
    "sumo": {
        "id": "lst_0000000000000006",
        "name": "Sumo",
        "type": "sumo",
        "status": "active",
        "sink": {"sumoSourceAddress": "https://endpoint1.collection.sumologic.com/receiver/v1/http/abc"},
    },
}


@pytest.mark.parametrize("stream_type", sorted(_WIRE_BY_TYPE))
def test_known_variants_round_trip(stream_type: str) -> None:
    wire = _WIRE_BY_TYPE[stream_type]

    stream = LogStream.from_api(wire)

    assert isinstance(stream.sink, SINK_TYPES[stream_type])
    assert stream.to_api() == wire
    assert json.loads(stream.to_json()) == wire


def test_sink_types_registry_covers_every_variant() -> None:
    assert SINK_TYPES == {
        "eventbridge": LogStreamSinkAmazonEventBridge,
        "eventgrid": LogStreamSinkAzureEventGrid,
        "http": LogStreamSinkHTTP,
        "datadog": LogStreamSinkDatadog,
        "splunk": LogStreamSinkSplunk,
        "sumo": LogStreamSinkSumo,
    }


def test_datadog_sink_decodes_into_variant() -> None:
    stream = LogStream.from_api({"type": "datadog", "sink": {"datadogRegion": "us1", "datadogApiKey": "k"}})

    assert isinstance(stream.sink, LogStreamSinkDatadog)
    assert stream.sink.region == "us1"
    assert stream.sink.api_key == "k"


def test_unknown_type_keeps_raw_sink() -> None:
    raw_sink = {"endpoint": "https://x", "nested": {"a": [1, 2, {"b": None}]}, "enabled": True}

    stream = LogStream.from_api({"type": "unknown-future-type", "sink": raw_sink})

    assert stream.type == "unknown-future-type"
    assert stream.sink == raw_sink
    assert stream.to_api()["sink"] == raw_sink


@pytest.mark.parametrize("payload", [{"sink": {"foo": "bar"}}, {"type": None, "sink": {"foo": "bar"}}])
def test_missing_type_keeps_raw_sink(payload: dict[str, Any]) -> None:
    stream = LogStream.from_api(payload)

    assert stream.type is None
    assert isinstance(stream.sink, dict)
    assert stream.sink == {"foo": "bar"}


def test_missing_sink_key_leaves_sink_unset() -> None:
    stream = LogStream.from_api({"id": "lst_1", "type": "datadog"})
    assert stream.sink is None


def test_unset_fields_are_omitted_from_encoding() -> None:
    stream = LogStream(name="only-a-name")

    assert stream.to_api() == {"name": "only-a-name"}
    assert "sink" not in stream.to_json()
    assert "null" not in stream.to_json()


def test_empty_string_is_distinct_from_absent() -> None:
    stream = LogStream(name="")
    assert stream.to_api() == {"name": ""}


def test_http_custom_headers_keep_order() -> None:
    headers = [
        {"header": "X-A", "value": "1"},
        {"header": "X-B", "value": "2"},
        {"header": "X-C", "value": "3"},
    ]
    wire = {"type": "http", "sink": {"httpEndpoint": "https://x", "httpCustomHeaders": headers}}

    stream = LogStream.from_api(wire)

    assert isinstance(stream.sink, LogStreamSinkHTTP)
    assert [(h.header, h.value) for h in stream.sink.custom_headers or []] == [("X-A", "1"), ("X-B", "2"), ("X-C", "3")]
    assert stream.to_api()["sink"]["httpCustomHeaders"] == headers


def test_http_document_end_to_end() -> None:
    raw = '{"type":"http","sink":{"httpEndpoint":"https://x","httpCustomHeaders":[{"header":"X-A","value":"1"}]}}'

    stream = LogStream.from_json(raw)

    assert isinstance(stream.sink, LogStreamSinkHTTP)
    assert stream.sink.endpoint == "https://x"
    assert stream.sink.custom_headers == [LogStreamSinkHTTPCustomHeader(header="X-A", value="1")]
    assert json.loads(stream.to_json()) == json.loads(raw)


def test_construct_with_variant_instance() -> None:
    stream = LogStream(
        name="splunk",
        type="splunk",
        sink=LogStreamSinkSplunk(domain="demo.splunk.com", token="t", port="8088", secure=False),
    )

    assert stream.to_api() == {
        "name": "splunk",
        "type": "splunk",
        "sink": {"splunkDomain": "demo.splunk.com", "splunkToken": "t", "splunkPort": "8088", "splunkSecure": False},
    }


def test_construct_with_dict_sink_for_known_type_builds_variant() -> None:
    stream = LogStream(type="sumo", sink={"sumoSourceAddress": "https://collector"})

    assert isinstance(stream.sink, LogStreamSinkSumo)
    assert stream.sink.source_address == "https://collector"


@pytest.mark.parametrize("stream_type", ["splunk", "custom"])
def test_variant_not_matching_type_is_rejected(stream_type: str) -> None:
    with pytest.raises(ValidationError):
        LogStream(type=stream_type, sink=LogStreamSinkDatadog(region="us", api_key="k"))


def test_variant_without_type_is_accepted_for_sink_only_updates() -> None:
    stream = LogStream(sink=LogStreamSinkHTTP(endpoint="https://new"))

    assert stream.to_api() == {"sink": {"httpEndpoint": "https://new"}}


def test_known_variant_ignores_unrecognized_keys() -> None:
    stream = LogStream.from_api({"type": "datadog", "sink": {"datadogRegion": "eu", "datadogSite": "new"}})

    assert isinstance(stream.sink, LogStreamSinkDatadog)
    assert stream.to_api() == {"type": "datadog", "sink": {"datadogRegion": "eu"}}


def test_status_with_wrong_type_fails() -> None:
    with pytest.raises(DeserializationError):
        LogStream.from_api({"id": "lst_1", "status": 1})


@pytest.mark.parametrize(
    "sink",
    [
        {"splunkSecure": "yes"},
        {"splunkPort": 8088},
        {"splunkDomain": ["a", "b"]},
    ],
)
def test_known_variant_field_with_wrong_type_fails(sink: dict[str, Any]) -> None:
    with pytest.raises(DeserializationError):
        LogStream.from_api({"type": "splunk", "sink": sink})


def test_known_variant_with_non_object_sink_fails() -> None:
    with pytest.raises(DeserializationError):
        LogStream.from_api({"type": "sumo", "sink": "https://collector"})


def test_untyped_sink_must_be_an_object() -> None:
    with pytest.raises(DeserializationError):
        LogStream.from_api({"sink": [1, 2, 3]})


@pytest.mark.parametrize("raw", ['{"type": "http", ', "[]", "not json"])
def test_malformed_json_fails(raw: str) -> None:
    with pytest.raises(DeserializationError):
        LogStream.from_json(raw)


@pytest.mark.parametrize("sink", [{"at": datetime(2024, 1, 1)}, {"ratio": float("nan")}, {"tags": {"a", "b"}}])
def test_unserializable_raw_sink_fails_to_encode(sink: dict[str, Any]) -> None:
    stream = LogStream(type="custom", sink=sink)

    with pytest.raises(SerializationError):
        stream.to_api()


def test_decoding_replaces_sink_entirely() -> None:
    original = LogStream(type="datadog", sink=LogStreamSinkDatadog(region="us", api_key="old"))

    decoded = LogStream.from_api({**original.to_api(), "sink": {"datadogRegion": "eu"}})

    assert isinstance(decoded.sink, LogStreamSinkDatadog)
    assert decoded.sink.region == "eu"
    assert decoded.sink.api_key is None
