from datetime import datetime, timezone

import pytest

from blog_weather.core.exceptions import ErrorKind
from blog_weather.core.health import WeatherStats


@pytest.fixture()
def stats() -> WeatherStats:
    stats = WeatherStats()
    stats.record_cache_hit()
    stats.record_cache_hit()
    stats.record_cache_miss()
    stats.record_attempt()
    stats.record_error(ErrorKind.NETWORK_ERROR)
    stats.record_error(ErrorKind.NETWORK_ERROR)
    stats.record_error(ErrorKind.LOCATION_NOT_FOUND)
    stats.record_success(datetime(2024, 1, 10, 12, 30, tzinfo=timezone.utc))
    return stats


def test_snapshot_reports_counters(stats: WeatherStats) -> None:
    payload = stats.snapshot()

    assert payload["cache"] == {"hits": 2, "misses": 1, "errors": 0}
    assert payload["upstream"] == {"attempts": 1, "lastSuccess": "2024-01-10T12:30:00Z"}
    assert payload["errors"] == {"NETWORK_ERROR": 2, "LOCATION_NOT_FOUND": 1}


def test_errors_can_be_drained(stats: WeatherStats) -> None:
    drained = stats.drain_errors()

    assert drained == {"NETWORK_ERROR": 2, "LOCATION_NOT_FOUND": 1}
    assert stats.snapshot()["errors"] == {}


def test_naive_success_time_is_treated_as_utc() -> None:
    stats = WeatherStats()
    stats.record_success(datetime(2024, 1, 10, 8, 0))

    assert stats.snapshot()["upstream"]["lastSuccess"] == "2024-01-10T08:00:00Z"
