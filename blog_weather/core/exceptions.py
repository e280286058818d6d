"""Error taxonomy for the weather service."""
from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Dict, List, Optional


class ErrorKind(str, enum.Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SERVICE_MISCONFIGURED = "SERVICE_MISCONFIGURED"
    LOCATION_NOT_FOUND = "LOCATION_NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    NETWORK_ERROR = "NETWORK_ERROR"


UNAVAILABLE_MESSAGE = "Weather data is currently unavailable. Please try again later."

USER_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.VALIDATION_ERROR: "Invalid coordinates",
    ErrorKind.SERVICE_MISCONFIGURED: "Weather service is not properly configured",
    ErrorKind.LOCATION_NOT_FOUND: "Location not found",
    ErrorKind.RATE_LIMIT_EXCEEDED: "Weather service temporarily unavailable due to high demand",
    ErrorKind.SERVICE_UNAVAILABLE: UNAVAILABLE_MESSAGE,
    ErrorKind.NETWORK_ERROR: UNAVAILABLE_MESSAGE,
}

RETRYABLE_KINDS = frozenset(
    {ErrorKind.NETWORK_ERROR, ErrorKind.SERVICE_UNAVAILABLE, ErrorKind.RATE_LIMIT_EXCEEDED}
)


class WeatherServiceError(RuntimeError):
    """A classified failure surfaced to callers of the weather service.

    ``message`` is meant for logs, ``user_message`` for the widget.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        user_message: Optional[str] = None,
        details: Optional[Dict[str, List[str]]] = None,
        timestamp: Optional[datetime] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.user_message = user_message or USER_MESSAGES[kind]
        self.details = details
        self.timestamp = timestamp or datetime.now(timezone.utc)

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    def as_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "userMessage": self.user_message,
            "retryable": self.retryable,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind.value}, message={self.message!r})"


class CoordinateValidationError(WeatherServiceError):
    """Raised when lat/lon input cannot be turned into valid coordinates."""

    def __init__(self, details: Dict[str, List[str]]) -> None:
        fields = ", ".join(sorted(details))
        super().__init__(
            ErrorKind.VALIDATION_ERROR,
            f"invalid coordinates: {fields}",
            details=details,
        )


class TransportError(Exception):
    """Connection-level failure: no HTTP status is available."""

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out


class MalformedResponseError(ValueError):
    """A successful upstream response whose body cannot be normalized."""


__all__ = [
    "CoordinateValidationError",
    "ErrorKind",
    "MalformedResponseError",
    "RETRYABLE_KINDS",
    "TransportError",
    "UNAVAILABLE_MESSAGE",
    "USER_MESSAGES",
    "WeatherServiceError",
]
