"""Management command to fetch weather using the same stack as the API."""
from __future__ import annotations

import json
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from blog_weather.api.views import _serialize_snapshot, get_weather_service
from blog_weather.core.exceptions import WeatherServiceError


class Command(BaseCommand):
    help = "Fetch current weather for the provided coordinates"

    def add_arguments(self, parser) -> None:  # noqa: D401
        parser.add_argument("--lat", type=str, help="Latitude")
        parser.add_argument("--lon", type=str, help="Longitude")
        parser.add_argument("--default", action="store_true", help="Use the configured default location")
        parser.add_argument(
            "--clear-cache",
            action="store_true",
            help="Drop the cached entry for the coordinates before fetching",
        )

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        service = get_weather_service()
        latitude = options.get("lat")
        longitude = options.get("lon")

        if options.get("default"):
            location = service.get_default_location()
            latitude, longitude = location.lat, location.lon
        elif latitude is None or longitude is None:
            raise CommandError("--lat and --lon are required unless using --default")

        try:
            if options.get("clear_cache"):
                removed = service.clear_cache(latitude, longitude)
                self.stderr.write(f"cache entry {'removed' if removed else 'not present'}")
            snapshot = service.fetch_weather_data(latitude, longitude)
        except WeatherServiceError as exc:
            raise CommandError(f"{exc.kind.value}: {exc.user_message}") from exc

        self.stdout.write(json.dumps(_serialize_snapshot(snapshot)))
