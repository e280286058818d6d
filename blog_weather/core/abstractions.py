"""Core abstractions for the weather domain."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Protocol


@dataclass(frozen=True, slots=True)
class Coordinates:
    """Validated latitude/longitude pair."""

    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class WeatherSnapshot:
    """Normalized current weather for a location.

    Units follow the upstream metric response:
    - temperature in Celsius, kept at upstream precision
    - humidity in whole percent
    - wind speed in metres per second (m/s)
    """

    location: str
    temperature_c: float
    condition: str
    description: str
    icon: str
    humidity_pct: int
    wind_speed_ms: float
    observed_at: datetime
    coordinates: Coordinates


@dataclass(frozen=True, slots=True)
class UpstreamResponse:
    """Raw HTTP answer from the weather provider, before classification."""

    status_code: int
    body: str
    payload: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class CacheStore(Protocol):
    """Key/value store for snapshots with per-entry expiry."""

    def get(self, key: str) -> Optional[WeatherSnapshot]:
        """Return the live snapshot for ``key`` or ``None``."""
        ...

    def set(self, key: str, value: WeatherSnapshot, ttl_seconds: float) -> None:
        """Store ``value`` under ``key``, replacing any entry and resetting its TTL."""
        ...

    def invalidate(self, key: str) -> bool:
        """Drop ``key``; return whether an entry was removed."""
        ...


class WeatherClient(Protocol):
    """A data source returning raw upstream responses for coordinates."""

    name: str

    def fetch(self, coordinates: Coordinates) -> UpstreamResponse:
        """Issue a single upstream request for ``coordinates``."""
        ...


__all__ = ["CacheStore", "Coordinates", "UpstreamResponse", "WeatherClient", "WeatherSnapshot"]
