"""In-memory runtime counters for the weather health endpoint.

Counters live for the lifetime of the process and are reset on restart; they
are meant for a quick look at cache effectiveness and upstream trouble, not
for long-term metrics.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Optional

from .exceptions import ErrorKind


@dataclass(frozen=True)
class CacheStats:
    """Simple container for cache related counters."""

    hits: int = 0
    misses: int = 0
    errors: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "errors": self.errors}


class WeatherStats:
    """Stores cache counters, upstream attempt counts and error kinds."""

    def __init__(self) -> None:
        self._cache = CacheStats()
        self._upstream_attempts = 0
        self._errors: Dict[str, int] = {}
        self._last_success: Optional[str] = None
        self._lock = Lock()

    # -- Cache --------------------------------------------------------------
    def record_cache_hit(self) -> None:
        with self._lock:
            self._cache = CacheStats(self._cache.hits + 1, self._cache.misses, self._cache.errors)

    def record_cache_miss(self) -> None:
        with self._lock:
            self._cache = CacheStats(self._cache.hits, self._cache.misses + 1, self._cache.errors)

    def record_cache_error(self) -> None:
        with self._lock:
            self._cache = CacheStats(self._cache.hits, self._cache.misses, self._cache.errors + 1)

    # -- Upstream -----------------------------------------------------------
    def record_attempt(self) -> None:
        with self._lock:
            self._upstream_attempts += 1

    def record_success(self, when: Optional[datetime] = None) -> None:
        when = when or datetime.now(timezone.utc)
        with self._lock:
            self._last_success = self._format_datetime(when)

    def record_error(self, kind: ErrorKind) -> None:
        with self._lock:
            self._errors[kind.value] = self._errors.get(kind.value, 0) + 1

    def drain_errors(self) -> Dict[str, int]:
        with self._lock:
            snapshot = dict(self._errors)
            self._errors.clear()
            return snapshot

    # -- Snapshot -----------------------------------------------------------
    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "cache": self._cache.as_dict(),
                "upstream": {
                    "attempts": self._upstream_attempts,
                    "lastSuccess": self._last_success,
                },
                "errors": dict(self._errors),
            }

    @staticmethod
    def _format_datetime(value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


__all__ = ["CacheStats", "WeatherStats"]
