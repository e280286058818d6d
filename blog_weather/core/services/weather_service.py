"""Weather service that validates, caches and fetches current conditions."""
from __future__ import annotations

import logging
import random
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, Optional

from blog_weather.core.abstractions import CacheStore, Coordinates, WeatherClient, WeatherSnapshot
from blog_weather.core.cache import cache_key
from blog_weather.core.classifier import classify, misconfigured
from blog_weather.core.config import DefaultLocation, WeatherConfig
from blog_weather.core.exceptions import MalformedResponseError, TransportError, WeatherServiceError
from blog_weather.core.health import WeatherStats
from blog_weather.core.providers.openweather import parse_current_weather
from blog_weather.core.validation import validate_coordinates


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class WeatherService:
    """Validate → cache lookup → fetch with retries → normalize → cache store.

    Only the upstream call blocks. Concurrent misses for the same key are
    collapsed into one upstream call when ``single_flight`` is on; otherwise
    they race and the last cache write wins.
    """

    def __init__(
        self,
        *,
        config: WeatherConfig,
        cache: CacheStore,
        client: WeatherClient,
        stats: Optional[WeatherStats] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
        jitter: Callable[[float, float], float] = random.uniform,
        single_flight: bool = True,
    ) -> None:
        self.config = config
        self.cache = cache
        self.client = client
        self.stats = stats or WeatherStats()
        self._sleep = sleep
        self._clock = clock
        self._jitter = jitter
        self._single_flight = single_flight
        self._key_locks: Dict[str, _KeyLock] = {}
        self._key_locks_guard = threading.Lock()

    # Public API ---------------------------------------------------------
    def fetch_weather_data(self, lat: object, lon: object) -> WeatherSnapshot:
        coordinates = validate_coordinates(lat, lon)
        if not self.config.is_configured:
            logger.error("Weather API key is not configured")
            error = misconfigured()
            self.stats.record_error(error.kind)
            raise error

        key = cache_key(coordinates)
        cached = self._cached(key, coordinates)
        if cached is not None:
            return cached

        if not self._single_flight:
            self.stats.record_cache_miss()
            return self._fetch_and_store(key, coordinates)

        with self._key_lock(key):
            # another caller may have filled the entry while we waited
            cached = self._cached(key, coordinates)
            if cached is not None:
                return cached
            self.stats.record_cache_miss()
            return self._fetch_and_store(key, coordinates)

    def clear_cache(self, lat: object, lon: object) -> bool:
        coordinates = validate_coordinates(lat, lon)
        key = cache_key(coordinates)
        try:
            removed = self.cache.invalidate(key)
        except Exception as exc:  # noqa: BLE001 - cache is an optimization only
            self.stats.record_cache_error()
            logger.warning("Weather cache invalidate failed for %s: %s", key, exc)
            return False
        logger.info("Weather cache cleared", extra={"cache_key": key, "removed": removed})
        return removed

    def get_default_location(self) -> DefaultLocation:
        return self.config.default_location

    # Helpers ------------------------------------------------------------
    def _fetch_and_store(self, key: str, coordinates: Coordinates) -> WeatherSnapshot:
        snapshot = self._fetch_with_retries(coordinates)
        self._cache_set(key, snapshot)
        logger.info("Weather data fetched and cached", extra={"lat": coordinates.lat, "lon": coordinates.lon})
        return snapshot

    def _fetch_with_retries(self, coordinates: Coordinates) -> WeatherSnapshot:
        attempts = self.config.retry_attempts
        started = time.monotonic()
        last_error: Optional[WeatherServiceError] = None

        for attempt in range(1, attempts + 1):
            self.stats.record_attempt()
            attempt_started = time.monotonic()
            outcome = self._attempt(coordinates)
            duration_ms = round((time.monotonic() - attempt_started) * 1000, 2)
            if isinstance(outcome, WeatherSnapshot):
                self.stats.record_success()
                logger.info(
                    "Weather API request successful",
                    extra={"attempt": attempt, "duration_ms": duration_ms},
                )
                return outcome

            error = outcome
            self.stats.record_error(error.kind)
            if not error.retryable:
                logger.error(
                    "Weather API non-retryable error: %s",
                    error.message,
                    extra={"kind": error.kind.value, "attempt": attempt, "duration_ms": duration_ms},
                )
                raise error

            last_error = error
            logger.warning(
                "Weather API attempt %s/%s failed: %s",
                attempt,
                attempts,
                error.message,
                extra={"kind": error.kind.value, "duration_ms": duration_ms},
            )
            if attempt < attempts:
                delay = self._backoff_delay(attempt)
                logger.info("Retrying weather API request in %.2f seconds", delay)
                self._sleep(delay)

        assert last_error is not None
        logger.error(
            "Weather API requests exhausted after %s attempts: %s",
            attempts,
            last_error.message,
            extra={
                "kind": last_error.kind.value,
                "total_duration_ms": round((time.monotonic() - started) * 1000, 2),
            },
        )
        raise last_error

    def _attempt(self, coordinates: Coordinates):
        """Return a snapshot on success or the classified error on failure."""
        try:
            response = self.client.fetch(coordinates)
        except TransportError as exc:
            return classify(exc)

        if not response.ok:
            logger.warning(
                "Weather API returned error status %s",
                response.status_code,
                extra={"status": response.status_code, "response_body": response.body[:500]},
            )
            return classify(response)

        try:
            return parse_current_weather(response.payload, coordinates, self._clock())
        except MalformedResponseError as exc:
            logger.warning("Invalid weather data received: %s", exc)
            return classify(response)

    def _backoff_delay(self, attempt: int) -> float:
        base = self.config.backoff_base * 2 ** (attempt - 1)
        return base + self._jitter(0.0, self.config.backoff_jitter)

    def _cache_get(self, key: str) -> Optional[WeatherSnapshot]:
        try:
            return self.cache.get(key)
        except Exception as exc:  # noqa: BLE001 - cache is an optimization only
            self.stats.record_cache_error()
            logger.warning("Weather cache read failed for %s: %s", key, exc)
            return None

    def _cache_set(self, key: str, snapshot: WeatherSnapshot) -> None:
        try:
            self.cache.set(key, snapshot, self.config.cache_ttl)
        except Exception as exc:  # noqa: BLE001 - cache is an optimization only
            self.stats.record_cache_error()
            logger.warning("Weather cache write failed for %s: %s", key, exc)

    def _cached(self, key: str, coordinates: Coordinates) -> Optional[WeatherSnapshot]:
        cached = self._cache_get(key)
        if cached is not None:
            self.stats.record_cache_hit()
            logger.info("Weather data retrieved from cache", extra={"lat": coordinates.lat, "lon": coordinates.lon})
        return cached

    @contextmanager
    def _key_lock(self, key: str) -> Iterator[None]:
        """Hold the per-key lock; the entry is dropped once nobody holds or waits on it."""
        with self._key_locks_guard:
            entry = self._key_locks.get(key)
            if entry is None:
                entry = self._key_locks[key] = _KeyLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._key_locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._key_locks[key]


class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


__all__ = ["WeatherService"]
