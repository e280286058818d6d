"""Base Django settings for the blog weather service."""
from __future__ import annotations

from pathlib import Path
import os

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def env(name: str, default: str | None = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


SECRET_KEY = env("DJANGO_SECRET_KEY")
DEBUG = os.environ.get("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",")

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "rest_framework",
    "blog_weather.api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "blog_weather.urls"

WSGI_APPLICATION = "blog_weather.wsgi.application"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
    }
}

REDIS_URL = os.environ.get("REDIS_URL")
if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_URL,
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
            },
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "weather-local",
        }
    }

WEATHER_CACHE_ALIAS = os.environ.get("WEATHER_CACHE_ALIAS", "default")

WEATHER = {
    "api_key": os.environ.get("OPENWEATHER_API_KEY", ""),
    "api_url": os.environ.get("OPENWEATHER_API_URL", "https://api.openweathermap.org/data/2.5"),
    "cache_ttl": os.environ.get("WEATHER_CACHE_TTL", "900"),
    "retry_attempts": os.environ.get("WEATHER_RETRY_ATTEMPTS", "3"),
    "request_timeout": os.environ.get("WEATHER_REQUEST_TIMEOUT", "10"),
    "backoff_base": os.environ.get("WEATHER_BACKOFF_BASE", "1.0"),
    "backoff_jitter": os.environ.get("WEATHER_BACKOFF_JITTER", "1.0"),
    "default_location": {
        "lat": os.environ.get("WEATHER_DEFAULT_LAT", "40.7128"),
        "lon": os.environ.get("WEATHER_DEFAULT_LON", "-74.0060"),
        "name": os.environ.get("WEATHER_DEFAULT_LOCATION", "New York, NY"),
    },
    "widget": {
        "enabled": os.environ.get("WEATHER_WIDGET_ENABLED", "1"),
        "auto_refresh_interval": os.environ.get("WEATHER_AUTO_REFRESH_INTERVAL", "1800"),
        "show_detailed_info": os.environ.get("WEATHER_SHOW_DETAILED_INFO", "1"),
        "temperature_unit": os.environ.get("WEATHER_TEMPERATURE_UNIT", "celsius"),
    },
    "rate_limiting": {
        "enabled": os.environ.get("WEATHER_RATE_LIMITING_ENABLED", "1"),
        "max_requests_per_minute": os.environ.get("WEATHER_MAX_REQUESTS_PER_MINUTE", "60"),
        "max_requests_per_hour": os.environ.get("WEATHER_MAX_REQUESTS_PER_HOUR", "1000"),
    },
}

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "blog_weather.api.exceptions.weather_exception_handler",
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "blog_weather": {
            "handlers": ["console"],
            "level": os.environ.get("WEATHER_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True
