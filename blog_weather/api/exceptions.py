"""DRF exception handler rendering errors as ``{"error": ...}``."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from blog_weather.core.exceptions import USER_MESSAGES, ErrorKind, WeatherServiceError


logger = logging.getLogger(__name__)

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.SERVICE_MISCONFIGURED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.LOCATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.RATE_LIMIT_EXCEEDED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.NETWORK_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def weather_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    if isinstance(exc, WeatherServiceError):
        payload: Dict[str, Any] = {"error": exc.user_message}
        if exc.details:
            payload["details"] = exc.details
        logger.info("Weather request failed with %s: %s", exc.kind.value, exc.message)
        return Response(payload, status=STATUS_BY_KIND[exc.kind])

    response = exception_handler(exc, context)
    if response is None:
        return None
    if isinstance(exc, exceptions.Throttled):
        response.data = {"error": USER_MESSAGES[ErrorKind.RATE_LIMIT_EXCEEDED]}
    elif isinstance(response.data, dict) and "detail" in response.data:
        response.data = {"error": str(response.data["detail"])}
    return response


__all__ = ["STATUS_BY_KIND", "weather_exception_handler"]
