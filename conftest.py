from __future__ import annotations

import os

import django
import pytest
import requests_mock as requests_mock_lib


os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "blog_weather.settings")
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key")
os.environ.setdefault("OPENWEATHER_API_URL", "https://owm.test/data/2.5")
os.environ.setdefault("WEATHER_BACKOFF_BASE", "0")
os.environ.setdefault("WEATHER_BACKOFF_JITTER", "0")

django.setup()


@pytest.fixture()
def requests_mock():
    with requests_mock_lib.Mocker() as mocker:
        yield mocker
