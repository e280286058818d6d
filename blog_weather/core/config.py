"""Typed weather configuration, validated once at startup."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from django.core.exceptions import ImproperlyConfigured

from .providers.openweather import DEFAULT_API_URL


logger = logging.getLogger(__name__)

FALLBACK_LAT = 40.7128
FALLBACK_LON = -74.0060
FALLBACK_NAME = "New York, NY"
TEMPERATURE_UNITS = ("celsius", "fahrenheit")


@dataclass(frozen=True)
class DefaultLocation:
    lat: float = FALLBACK_LAT
    lon: float = FALLBACK_LON
    name: str = FALLBACK_NAME

    def as_dict(self) -> Dict[str, Any]:
        return {"lat": self.lat, "lon": self.lon, "name": self.name}


@dataclass(frozen=True)
class WidgetConfig:
    enabled: bool = True
    auto_refresh_interval: int = 1800
    show_detailed_info: bool = True
    temperature_unit: str = "celsius"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "auto_refresh_interval": self.auto_refresh_interval,
            "show_detailed_info": self.show_detailed_info,
            "temperature_unit": self.temperature_unit,
        }


@dataclass(frozen=True)
class RateLimitConfig:
    enabled: bool = True
    max_requests_per_minute: int = 60
    max_requests_per_hour: int = 1000


@dataclass(frozen=True)
class WeatherConfig:
    """Everything the weather stack reads from the environment."""

    api_key: str = ""
    api_url: str = DEFAULT_API_URL
    cache_ttl: int = 900
    retry_attempts: int = 3
    request_timeout: float = 10.0
    backoff_base: float = 1.0
    backoff_jitter: float = 1.0
    default_location: DefaultLocation = field(default_factory=DefaultLocation)
    widget: WidgetConfig = field(default_factory=WidgetConfig)
    rate_limiting: RateLimitConfig = field(default_factory=RateLimitConfig)

    def __post_init__(self) -> None:
        if self.retry_attempts < 1:
            raise ValueError(f"retry_attempts must be at least 1, got {self.retry_attempts}")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "WeatherConfig":
        """Build a config from a settings-style mapping.

        Invalid values are replaced by safe fallbacks with a warning; only a
        missing API URL is fatal.
        """
        raw = raw or {}
        api_url = str(raw.get("api_url") or "").strip()
        if not api_url:
            raise ImproperlyConfigured("OpenWeather API URL is required but not configured")

        return cls(
            api_key=str(raw.get("api_key") or "").strip(),
            api_url=api_url,
            cache_ttl=int(_bounded("cache_ttl", raw.get("cache_ttl", 900), 60, minimum=60)),
            retry_attempts=int(_bounded("retry_attempts", raw.get("retry_attempts", 3), 3, minimum=1, maximum=10)),
            request_timeout=_bounded("request_timeout", raw.get("request_timeout", 10), 10, minimum=1, maximum=60),
            backoff_base=_bounded("backoff_base", raw.get("backoff_base", 1.0), 1.0, minimum=0),
            backoff_jitter=_bounded("backoff_jitter", raw.get("backoff_jitter", 1.0), 1.0, minimum=0),
            default_location=_default_location(raw.get("default_location") or {}),
            widget=_widget(raw.get("widget") or {}),
            rate_limiting=_rate_limiting(raw.get("rate_limiting") or {}),
        )


def load_weather_config() -> WeatherConfig:
    from django.conf import settings

    return WeatherConfig.from_mapping(getattr(settings, "WEATHER", None))


# helpers ------------------------------------------------------------
def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _bounded(
    name: str,
    value: Any,
    fallback: float,
    *,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> float:
    number = _number(value)
    if (
        number is None
        or (minimum is not None and number < minimum)
        or (maximum is not None and number > maximum)
    ):
        logger.warning("Invalid weather setting %s=%r, using %s", name, value, fallback)
        return float(fallback)
    return number


def _default_location(raw: Mapping[str, Any]) -> DefaultLocation:
    lat = _number(raw.get("lat"))
    if lat is None or not -90 <= lat <= 90:
        logger.warning("Invalid default latitude %r in weather config, using fallback", raw.get("lat"))
        lat = FALLBACK_LAT
    lon = _number(raw.get("lon"))
    if lon is None or not -180 <= lon <= 180:
        logger.warning("Invalid default longitude %r in weather config, using fallback", raw.get("lon"))
        lon = FALLBACK_LON
    name = str(raw.get("name") or "").strip()
    if not name:
        logger.warning("Empty default location name in weather config, using fallback")
        name = FALLBACK_NAME
    return DefaultLocation(lat=lat, lon=lon, name=name)


def _widget(raw: Mapping[str, Any]) -> WidgetConfig:
    unit = str(raw.get("temperature_unit") or "celsius").lower()
    if unit not in TEMPERATURE_UNITS:
        logger.warning("Invalid temperature unit %r in weather config, using celsius", unit)
        unit = "celsius"
    return WidgetConfig(
        enabled=_flag(raw.get("enabled"), True),
        auto_refresh_interval=int(
            _bounded("widget.auto_refresh_interval", raw.get("auto_refresh_interval", 1800), 300, minimum=300)
        ),
        show_detailed_info=_flag(raw.get("show_detailed_info"), True),
        temperature_unit=unit,
    )


def _rate_limiting(raw: Mapping[str, Any]) -> RateLimitConfig:
    return RateLimitConfig(
        enabled=_flag(raw.get("enabled"), True),
        max_requests_per_minute=int(
            _bounded("rate_limiting.max_requests_per_minute", raw.get("max_requests_per_minute", 60), 60, minimum=1)
        ),
        max_requests_per_hour=int(
            _bounded("rate_limiting.max_requests_per_hour", raw.get("max_requests_per_hour", 1000), 1000, minimum=1)
        ),
    )


__all__ = [
    "DefaultLocation",
    "RateLimitConfig",
    "WeatherConfig",
    "WidgetConfig",
    "load_weather_config",
]
