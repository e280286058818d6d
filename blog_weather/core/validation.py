from __future__ import annotations

import math
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .abstractions import Coordinates
from .exceptions import CoordinateValidationError

LAT_RANGE = (-90.0, 90.0)
LON_RANGE = (-180.0, 180.0)


def validate_coordinates(lat: object, lon: object) -> Coordinates:
    """Coerce raw ``lat``/``lon`` input into :class:`Coordinates`.

    Both fields are checked before raising so the caller sees every problem
    at once.
    """
    errors: Dict[str, List[str]] = {}
    lat_value = _check_field("lat", lat, LAT_RANGE, errors)
    lon_value = _check_field("lon", lon, LON_RANGE, errors)
    if errors:
        raise CoordinateValidationError(errors)
    assert lat_value is not None and lon_value is not None
    return Coordinates(lat=lat_value, lon=lon_value)


def _check_field(
    name: str,
    raw: object,
    bounds: Tuple[float, float],
    errors: Dict[str, List[str]],
) -> Optional[float]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        errors.setdefault(name, []).append("is required")
        return None
    value = _coerce_float(raw)
    if value is None:
        errors.setdefault(name, []).append("must be a valid number")
        return None
    low, high = bounds
    if not low <= value <= high:
        errors.setdefault(name, []).append(f"must be between {low:g} and {high:g} degrees")
        return None
    return value


def _coerce_float(raw: object) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
    elif not isinstance(raw, (int, float, Decimal)):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


__all__ = ["LAT_RANGE", "LON_RANGE", "validate_coordinates"]
