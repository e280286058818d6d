"""OpenWeather current weather client."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

import requests

from blog_weather.core.abstractions import Coordinates, UpstreamResponse, WeatherSnapshot
from blog_weather.core.exceptions import MalformedResponseError, TransportError


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.openweathermap.org/data/2.5"


class OpenWeatherClient:
    """Issue one ``GET /weather`` per call; never retries on its own."""

    name = "openweather"

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/weather"

    def fetch(self, coordinates: Coordinates) -> UpstreamResponse:
        params = {
            "lat": coordinates.lat,
            "lon": coordinates.lon,
            "appid": self.api_key,
            "units": "metric",
        }
        try:
            response = self.session.get(self.endpoint, params=params, timeout=self.timeout)
        except requests.Timeout as exc:
            logger.warning("OpenWeather request timed out after %ss", self.timeout)
            raise TransportError("request timed out", timed_out=True) from exc
        except requests.RequestException as exc:
            logger.warning("OpenWeather request failed: %s", exc)
            raise TransportError(f"request failed: {exc.__class__.__name__}") from exc

        return UpstreamResponse(
            status_code=response.status_code,
            body=response.text,
            payload=_json_or_none(response),
        )


def parse_current_weather(
    payload: Any,
    coordinates: Coordinates,
    observed_at: datetime,
) -> WeatherSnapshot:
    """Map an OpenWeather ``/weather`` body onto a :class:`WeatherSnapshot`."""
    if not isinstance(payload, Mapping):
        raise MalformedResponseError("response body is not a JSON object")

    main = payload.get("main")
    conditions = payload.get("weather")
    if not isinstance(main, Mapping):
        raise MalformedResponseError("missing required field: main")
    if not isinstance(conditions, list) or not conditions or not isinstance(conditions[0], Mapping):
        raise MalformedResponseError("missing required field: weather.0")
    condition = conditions[0]
    for field in ("main", "description", "icon"):
        if field not in condition:
            raise MalformedResponseError(f"missing required field: weather.0.{field}")

    wind = payload.get("wind") if isinstance(payload.get("wind"), Mapping) else {}
    return WeatherSnapshot(
        location=payload.get("name") or "Unknown Location",
        temperature_c=_required_number(main, "temp"),
        condition=str(condition["main"]),
        description=str(condition["description"]),
        icon=str(condition["icon"]),
        humidity_pct=int(round(_required_number(main, "humidity"))),
        wind_speed_ms=_optional_number(wind.get("speed")) or 0.0,
        observed_at=observed_at,
        coordinates=_upstream_coordinates(payload.get("coord"), coordinates),
    )


# helpers ------------------------------------------------------------
def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _required_number(container: Mapping[str, Any], field: str) -> float:
    if field not in container:
        raise MalformedResponseError(f"missing required field: main.{field}")
    value = _optional_number(container[field])
    if value is None:
        raise MalformedResponseError(f"field main.{field} is not numeric")
    return value


def _optional_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _upstream_coordinates(coord: Any, requested: Coordinates) -> Coordinates:
    if not isinstance(coord, Mapping):
        return requested
    lat = _optional_number(coord.get("lat"))
    lon = _optional_number(coord.get("lon"))
    if lat is None or lon is None:
        return requested
    return Coordinates(lat=lat, lon=lon)


__all__ = ["DEFAULT_API_URL", "OpenWeatherClient", "parse_current_weather"]
