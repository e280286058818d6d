"""Per-client request throttling driven by the weather rate-limit config."""
from __future__ import annotations

from typing import List

from rest_framework.throttling import SimpleRateThrottle

from blog_weather.core.config import RateLimitConfig


class WeatherRateThrottle(SimpleRateThrottle):
    """Anonymous per-IP throttle whose rate comes from :class:`RateLimitConfig`."""

    def __init__(self, limit: int, period: str) -> None:
        self.scope = f"weather_{period}"
        self.rate = f"{limit}/{period}"
        super().__init__()

    def get_cache_key(self, request, view):
        return self.cache_format % {"scope": self.scope, "ident": self.get_ident(request)}


def weather_throttles(config: RateLimitConfig) -> List[WeatherRateThrottle]:
    if not config.enabled:
        return []
    return [
        WeatherRateThrottle(config.max_requests_per_minute, "minute"),
        WeatherRateThrottle(config.max_requests_per_hour, "hour"),
    ]


__all__ = ["WeatherRateThrottle", "weather_throttles"]
