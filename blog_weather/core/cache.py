"""Snapshot cache stores keyed by rounded coordinates."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from django.core.cache.backends.base import BaseCache

from .abstractions import Coordinates, WeatherSnapshot


logger = logging.getLogger(__name__)

KEY_PRECISION = 4
KEY_PREFIX = "weather_data_"


def cache_key(coordinates: Coordinates) -> str:
    """Derive the cache key for ``coordinates`` at four decimal places."""
    # adding 0.0 folds -0.0 into 0.0 so both hemispheres of zero share a key
    lat = round(coordinates.lat, KEY_PRECISION) + 0.0
    lon = round(coordinates.lon, KEY_PRECISION) + 0.0
    return f"{KEY_PREFIX}{lat:.{KEY_PRECISION}f}_{lon:.{KEY_PRECISION}f}"


@dataclass(frozen=True)
class _CacheEntry:
    key: str
    value: WeatherSnapshot
    expires_at: float


class InMemoryCacheStore:
    """Process-local TTL store with lazy expiry."""

    def __init__(self, time_func: Callable[[], float] = time.monotonic) -> None:
        self._time_func = time_func
        self._storage: Dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[WeatherSnapshot]:
        with self._lock:
            entry = self._storage.get(key)
            if entry is None:
                return None
            if self._time_func() >= entry.expires_at:
                self._storage.pop(key, None)
                return None
            return entry.value

    def set(self, key: str, value: WeatherSnapshot, ttl_seconds: float) -> None:
        entry = _CacheEntry(key=key, value=value, expires_at=self._time_func() + ttl_seconds)
        with self._lock:
            self._storage[key] = entry

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._storage.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._storage.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)


class DjangoCacheStore:
    """Adapter over a configured Django cache backend (locmem, redis, ...).

    Snapshots are stored as plain dicts so any backend serializer can hold
    them. Backend errors propagate; the service decides how to degrade.
    """

    def __init__(self, cache: BaseCache) -> None:
        self._cache = cache

    def get(self, key: str) -> Optional[WeatherSnapshot]:
        payload = self._cache.get(key)
        if not payload:
            return None
        try:
            return self._deserialize(payload)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            self._cache.delete(key)
            return None

    def set(self, key: str, value: WeatherSnapshot, ttl_seconds: float) -> None:
        self._cache.set(key, self._serialize(value), ttl_seconds)

    def invalidate(self, key: str) -> bool:
        return bool(self._cache.delete(key))

    def _serialize(self, snapshot: WeatherSnapshot) -> Dict[str, Any]:
        return {
            "location": snapshot.location,
            "temperature_c": snapshot.temperature_c,
            "condition": snapshot.condition,
            "description": snapshot.description,
            "icon": snapshot.icon,
            "humidity_pct": snapshot.humidity_pct,
            "wind_speed_ms": snapshot.wind_speed_ms,
            "observed_at": snapshot.observed_at.isoformat().replace("+00:00", "Z"),
            "lat": snapshot.coordinates.lat,
            "lon": snapshot.coordinates.lon,
        }

    def _deserialize(self, payload: Dict[str, Any]) -> WeatherSnapshot:
        observed_at = datetime.fromisoformat(payload["observed_at"].replace("Z", "+00:00"))
        return WeatherSnapshot(
            location=payload["location"],
            temperature_c=float(payload["temperature_c"]),
            condition=payload["condition"],
            description=payload["description"],
            icon=payload["icon"],
            humidity_pct=int(payload["humidity_pct"]),
            wind_speed_ms=float(payload["wind_speed_ms"]),
            observed_at=observed_at,
            coordinates=Coordinates(lat=float(payload["lat"]), lon=float(payload["lon"])),
        )


__all__ = ["DjangoCacheStore", "InMemoryCacheStore", "KEY_PRECISION", "cache_key"]
