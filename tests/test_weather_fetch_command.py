from __future__ import annotations

import json
from io import StringIO

import pytest
from django.core.cache import caches
from django.core.management import call_command
from django.core.management.base import CommandError

from blog_weather.api import views


UPSTREAM_URL = "https://owm.test/data/2.5/weather"


@pytest.fixture(autouse=True)
def _reset_state():
    caches["default"].clear()
    views.get_weather_service.cache_clear()
    yield
    caches["default"].clear()
    views.get_weather_service.cache_clear()


def test_command_prints_payload(requests_mock, owm_payload) -> None:
    requests_mock.get(UPSTREAM_URL, json=owm_payload)
    out = StringIO()

    call_command("weather_fetch", "--lat", "40.7128", "--lon", "-74.0060", stdout=out)

    payload = json.loads(out.getvalue())
    assert payload["location"] == "New York"
    assert payload["temperature"] == 23
    assert requests_mock.call_count == 1


def test_command_uses_default_location(requests_mock, owm_payload) -> None:
    requests_mock.get(UPSTREAM_URL, json=owm_payload)

    call_command("weather_fetch", "--default", stdout=StringIO())

    assert requests_mock.last_request.qs["lat"] == ["40.7128"]


def test_command_clear_cache_refetches(requests_mock, owm_payload) -> None:
    requests_mock.get(UPSTREAM_URL, json=owm_payload)
    err = StringIO()

    call_command("weather_fetch", "--lat", "1", "--lon", "1", stdout=StringIO())
    call_command("weather_fetch", "--lat", "1", "--lon", "1", stdout=StringIO())
    call_command("weather_fetch", "--lat", "1", "--lon", "1", "--clear-cache", stdout=StringIO(), stderr=err)

    assert requests_mock.call_count == 2
    assert "removed" in err.getvalue()


def test_command_requires_coordinates() -> None:
    with pytest.raises(CommandError):
        call_command("weather_fetch", stdout=StringIO())


def test_command_reports_classified_errors(requests_mock) -> None:
    requests_mock.get(UPSTREAM_URL, status_code=404, json={"cod": "404", "message": "city not found"})

    with pytest.raises(CommandError) as exc_info:
        call_command("weather_fetch", "--lat", "1", "--lon", "1", stdout=StringIO())

    assert "LOCATION_NOT_FOUND" in str(exc_info.value)


def test_command_reports_invalid_coordinates() -> None:
    with pytest.raises(CommandError) as exc_info:
        call_command("weather_fetch", "--lat", "100", "--lon", "1", stdout=StringIO())

    assert "VALIDATION_ERROR" in str(exc_info.value)
