from __future__ import annotations

from datetime import datetime, timezone

import pytest
import requests

from blog_weather.core.abstractions import Coordinates
from blog_weather.core.exceptions import MalformedResponseError, TransportError
from blog_weather.core.providers.openweather import OpenWeatherClient, parse_current_weather


BASE_URL = "https://owm.test/data/2.5"
ENDPOINT = f"{BASE_URL}/weather"
NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_client(**kwargs) -> OpenWeatherClient:
    return OpenWeatherClient(api_key="secret", api_url=BASE_URL, **kwargs)


def test_fetch_sends_coordinates_and_credential(requests_mock, owm_payload) -> None:
    requests_mock.get(ENDPOINT, json=owm_payload)

    response = make_client().fetch(Coordinates(40.7128, -74.006))

    assert response.ok
    assert response.payload == owm_payload
    query = requests_mock.last_request.qs
    assert query["lat"] == ["40.7128"]
    assert query["lon"] == ["-74.006"]
    assert query["appid"] == ["secret"]
    assert query["units"] == ["metric"]


def test_fetch_uses_configured_timeout(requests_mock, owm_payload) -> None:
    requests_mock.get(ENDPOINT, json=owm_payload)

    make_client(timeout=4.0).fetch(Coordinates(1.0, 1.0))

    assert requests_mock.last_request.timeout == 4.0


def test_trailing_slash_in_base_url_is_ignored() -> None:
    client = OpenWeatherClient(api_key="k", api_url=f"{BASE_URL}/")

    assert client.endpoint == ENDPOINT


def test_error_status_is_returned_not_raised(requests_mock) -> None:
    requests_mock.get(ENDPOINT, status_code=401, json={"cod": 401, "message": "Invalid API key"})

    response = make_client().fetch(Coordinates(1.0, 1.0))

    assert not response.ok
    assert response.status_code == 401
    assert "Invalid API key" in response.body


def test_non_json_body_has_no_payload(requests_mock) -> None:
    requests_mock.get(ENDPOINT, status_code=502, text="<html>bad gateway</html>")

    response = make_client().fetch(Coordinates(1.0, 1.0))

    assert response.payload is None
    assert response.status_code == 502


def test_timeout_becomes_transport_error(requests_mock) -> None:
    requests_mock.get(ENDPOINT, exc=requests.exceptions.ConnectTimeout)

    with pytest.raises(TransportError) as exc_info:
        make_client().fetch(Coordinates(1.0, 1.0))

    assert exc_info.value.timed_out is True


def test_connection_error_becomes_transport_error(requests_mock) -> None:
    requests_mock.get(ENDPOINT, exc=requests.exceptions.ConnectionError)

    with pytest.raises(TransportError) as exc_info:
        make_client().fetch(Coordinates(1.0, 1.0))

    assert exc_info.value.timed_out is False


def test_parse_current_weather(owm_payload) -> None:
    snapshot = parse_current_weather(owm_payload, Coordinates(40.7128, -74.006), NOW)

    assert snapshot.location == "New York"
    assert snapshot.temperature_c == 22.5
    assert snapshot.condition == "Clear"
    assert snapshot.description == "clear sky"
    assert snapshot.icon == "01d"
    assert snapshot.humidity_pct == 65
    assert snapshot.wind_speed_ms == 3.2
    assert snapshot.observed_at == NOW
    assert snapshot.coordinates == Coordinates(40.7128, -74.006)


def test_parse_falls_back_to_requested_coordinates_and_defaults(owm_payload) -> None:
    del owm_payload["coord"]
    del owm_payload["name"]
    del owm_payload["wind"]

    snapshot = parse_current_weather(owm_payload, Coordinates(10.0, 20.0), NOW)

    assert snapshot.coordinates == Coordinates(10.0, 20.0)
    assert snapshot.location == "Unknown Location"
    assert snapshot.wind_speed_ms == 0.0


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: p["main"].pop("temp"),
        lambda p: p["main"].pop("humidity"),
        lambda p: p["main"].update(temp="warm"),
        lambda p: p.pop("weather"),
        lambda p: p.update(weather=[]),
        lambda p: p["weather"][0].pop("icon"),
        lambda p: p["weather"][0].pop("description"),
    ],
)
def test_parse_rejects_incomplete_payloads(owm_payload, mutate) -> None:
    mutate(owm_payload)

    with pytest.raises(MalformedResponseError):
        parse_current_weather(owm_payload, Coordinates(1.0, 1.0), NOW)


def test_parse_rejects_non_object_body() -> None:
    with pytest.raises(MalformedResponseError):
        parse_current_weather(None, Coordinates(1.0, 1.0), NOW)
