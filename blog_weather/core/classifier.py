"""Map upstream failures onto the closed :class:`ErrorKind` taxonomy.

Classification is pure: it only inspects the signal it is given.
"""
from __future__ import annotations

from typing import Any, Mapping, Union

from .abstractions import UpstreamResponse
from .exceptions import ErrorKind, MalformedResponseError, TransportError, WeatherServiceError

Signal = Union[UpstreamResponse, TransportError, MalformedResponseError]


def classify(signal: Signal) -> WeatherServiceError:
    if isinstance(signal, TransportError):
        reason = "timed out" if signal.timed_out else str(signal)
        return WeatherServiceError(ErrorKind.NETWORK_ERROR, f"transport error: {reason}")
    if isinstance(signal, MalformedResponseError):
        return WeatherServiceError(ErrorKind.SERVICE_UNAVAILABLE, f"invalid weather data: {signal}")
    if isinstance(signal, UpstreamResponse):
        return _classify_response(signal)
    raise TypeError(f"cannot classify {type(signal).__name__}")


def misconfigured(reason: str = "API key is not configured") -> WeatherServiceError:
    return WeatherServiceError(ErrorKind.SERVICE_MISCONFIGURED, reason)


def _classify_response(response: UpstreamResponse) -> WeatherServiceError:
    status = response.status_code
    message = f"upstream returned HTTP {status}"
    if status in (401, 403):
        return WeatherServiceError(ErrorKind.SERVICE_MISCONFIGURED, message)
    if status == 404 or _reports_not_found(response.payload):
        return WeatherServiceError(ErrorKind.LOCATION_NOT_FOUND, message)
    if status == 429:
        return WeatherServiceError(ErrorKind.RATE_LIMIT_EXCEEDED, message)
    if response.ok:
        # a 2xx that still failed normalization
        return WeatherServiceError(ErrorKind.SERVICE_UNAVAILABLE, f"{message} with unusable body")
    return WeatherServiceError(ErrorKind.SERVICE_UNAVAILABLE, message)


def _reports_not_found(payload: Any) -> bool:
    if not isinstance(payload, Mapping):
        return False
    if str(payload.get("cod", "")) == "404":
        return True
    return "city not found" in str(payload.get("message", "")).lower()


__all__ = ["classify", "misconfigured"]
