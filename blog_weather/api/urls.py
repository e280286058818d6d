"""API URL configuration."""
from __future__ import annotations

from django.urls import path

from blog_weather.api.views import WeatherConfigView, WeatherHealthView, WeatherView

urlpatterns = [
    path("weather", WeatherView.as_view(), name="weather"),
    path("weather/config", WeatherConfigView.as_view(), name="weather-config"),
    path("weather/health", WeatherHealthView.as_view(), name="weather-health"),
]
