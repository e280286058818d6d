"""REST API views for the weather widget."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Any, Dict

from django.conf import settings
from django.core.cache import caches
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from blog_weather.api.throttling import weather_throttles
from blog_weather.core.abstractions import WeatherSnapshot
from blog_weather.core.cache import DjangoCacheStore
from blog_weather.core.config import WeatherConfig, load_weather_config
from blog_weather.core.providers.openweather import OpenWeatherClient
from blog_weather.core.services.weather_service import WeatherService


@lru_cache(maxsize=1)
def get_weather_config() -> WeatherConfig:
    return load_weather_config()


@lru_cache(maxsize=1)
def get_weather_service() -> WeatherService:
    config = get_weather_config()
    client = OpenWeatherClient(
        api_key=config.api_key,
        api_url=config.api_url,
        timeout=config.request_timeout,
    )
    return WeatherService(
        config=config,
        cache=DjangoCacheStore(caches[settings.WEATHER_CACHE_ALIAS]),
        client=client,
    )


def _round_half_up(value: float, places: int = 0) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def _serialize_snapshot(snapshot: WeatherSnapshot) -> Dict[str, Any]:
    """Render a snapshot in the shape the widget consumes."""
    return {
        "location": snapshot.location,
        "temperature": int(_round_half_up(snapshot.temperature_c)),
        "condition": snapshot.condition,
        "description": snapshot.description,
        "icon": snapshot.icon,
        "humidity": snapshot.humidity_pct,
        "windSpeed": float(_round_half_up(snapshot.wind_speed_ms, 1)),
        "lastUpdated": snapshot.observed_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "coordinates": {"lat": snapshot.coordinates.lat, "lon": snapshot.coordinates.lon},
    }


class WeatherView(APIView):
    """Return current weather for ``lat``/``lon``, or the default location."""

    permission_classes = [AllowAny]

    def get_throttles(self):
        return weather_throttles(get_weather_config().rate_limiting)

    def get(self, request, *args, **kwargs):  # noqa: D401
        """Return the weather snapshot for the requested coordinates."""
        service = get_weather_service()
        lat = request.query_params.get("lat")
        lon = request.query_params.get("lon")
        if lat is None and lon is None:
            default = service.get_default_location()
            lat, lon = default.lat, default.lon

        snapshot = service.fetch_weather_data(lat, lon)
        return Response(_serialize_snapshot(snapshot), status=status.HTTP_200_OK)


class WeatherConfigView(APIView):
    """Expose the widget configuration to the frontend."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        config = get_weather_config()
        if not config.widget.enabled:
            return Response({"error": "Weather widget is disabled"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        if not config.is_configured:
            return Response(
                {"error": "Weather service is not properly configured"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return Response(
            {"default_location": config.default_location.as_dict(), "widget": config.widget.as_dict()},
            status=status.HTTP_200_OK,
        )


class WeatherHealthView(APIView):
    """Cache and upstream counters for operators."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        return Response(get_weather_service().stats.snapshot(), status=status.HTTP_200_OK)
