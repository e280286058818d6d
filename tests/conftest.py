from __future__ import annotations

from typing import Any, Dict

import pytest


class TimeController:
    def __init__(self) -> None:
        self.now = 0.0

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> TimeController:
    return TimeController()


@pytest.fixture
def owm_payload() -> Dict[str, Any]:
    """OpenWeather ``/weather`` body for New York, units=metric."""
    return {
        "coord": {"lon": -74.006, "lat": 40.7128},
        "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
        "base": "stations",
        "main": {"temp": 22.5, "feels_like": 22.1, "pressure": 1015, "humidity": 65},
        "wind": {"speed": 3.2, "deg": 200},
        "dt": 1700000000,
        "name": "New York",
        "cod": 200,
    }
