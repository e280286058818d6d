from __future__ import annotations

import pytest

from blog_weather.core.abstractions import UpstreamResponse
from blog_weather.core.classifier import classify, misconfigured
from blog_weather.core.exceptions import (
    UNAVAILABLE_MESSAGE,
    ErrorKind,
    MalformedResponseError,
    TransportError,
)


@pytest.mark.parametrize(
    "status, kind, retryable",
    [
        (401, ErrorKind.SERVICE_MISCONFIGURED, False),
        (403, ErrorKind.SERVICE_MISCONFIGURED, False),
        (404, ErrorKind.LOCATION_NOT_FOUND, False),
        (429, ErrorKind.RATE_LIMIT_EXCEEDED, True),
        (500, ErrorKind.SERVICE_UNAVAILABLE, True),
        (502, ErrorKind.SERVICE_UNAVAILABLE, True),
        (503, ErrorKind.SERVICE_UNAVAILABLE, True),
        (504, ErrorKind.SERVICE_UNAVAILABLE, True),
        (418, ErrorKind.SERVICE_UNAVAILABLE, True),
    ],
)
def test_status_codes_map_to_kinds(status, kind, retryable) -> None:
    error = classify(UpstreamResponse(status_code=status, body="oops"))

    assert error.kind is kind
    assert error.retryable is retryable
    assert str(status) in error.message


def test_user_messages_differ_from_internal_messages() -> None:
    error = classify(UpstreamResponse(status_code=401, body='{"cod":401}'))

    assert error.user_message == "Weather service is not properly configured"
    assert error.user_message != error.message


def test_rate_limit_user_message() -> None:
    error = classify(UpstreamResponse(status_code=429, body=""))

    assert error.user_message == "Weather service temporarily unavailable due to high demand"


def test_city_not_found_body_is_location_not_found() -> None:
    response = UpstreamResponse(
        status_code=200,
        body='{"cod":"404","message":"city not found"}',
        payload={"cod": "404", "message": "city not found"},
    )

    error = classify(response)

    assert error.kind is ErrorKind.LOCATION_NOT_FOUND
    assert error.user_message == "Location not found"


def test_transport_timeout_is_network_error() -> None:
    error = classify(TransportError("request timed out", timed_out=True))

    assert error.kind is ErrorKind.NETWORK_ERROR
    assert error.retryable is True
    assert error.user_message == UNAVAILABLE_MESSAGE
    assert "timed out" in error.message


def test_malformed_body_is_service_unavailable() -> None:
    error = classify(MalformedResponseError("missing required field: main.temp"))

    assert error.kind is ErrorKind.SERVICE_UNAVAILABLE
    assert error.retryable is True
    assert "main.temp" in error.message


def test_misconfigured_helper() -> None:
    error = misconfigured()

    assert error.kind is ErrorKind.SERVICE_MISCONFIGURED
    assert error.retryable is False


def test_error_serializes_with_timestamp() -> None:
    payload = classify(UpstreamResponse(status_code=503, body="")).as_dict()

    assert payload["kind"] == "SERVICE_UNAVAILABLE"
    assert payload["retryable"] is True
    assert payload["timestamp"].endswith("Z")


def test_unknown_signal_is_rejected() -> None:
    with pytest.raises(TypeError):
        classify("boom")  # type: ignore[arg-type]
