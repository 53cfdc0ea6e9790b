"""Django settings for the OpenSmile CRM backend."""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "")
DEBUG = _env_bool("DJANGO_DEBUG")
ALLOWED_HOSTS = [host for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost").split(",") if host]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "rest_framework",
    "rest_framework_simplejwt",
    "apps.common",
    "apps.accounts",
    "apps.practices",
    "apps.leads",
    "apps.appointments",
    "apps.webhooks",
    "apps.workers",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
]

ROOT_URLCONF = "opensmile.urls"
WSGI_APPLICATION = "opensmile.wsgi.application"
APPEND_SLASH = False

if os.environ.get("POSTGRES_DB"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ["POSTGRES_DB"],
            "USER": os.environ.get("POSTGRES_USER", "postgres"),
            "PASSWORD": os.environ.get("POSTGRES_PASSWORD", ""),
            "HOST": os.environ.get("POSTGRES_HOST", "localhost"),
            "PORT": os.environ.get("POSTGRES_PORT", "5432"),
            "CONN_MAX_AGE": 60,
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-gb"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "apps.accounts.authentication.AccountJWTAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "EXCEPTION_HANDLER": "apps.common.api.exception_handler",
    "UNAUTHENTICATED_USER": None,
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=_env_int("JWT_ACCESS_MINUTES", 30)),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=_env_int("JWT_REFRESH_DAYS", 7)),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

# Shared secret for the Meta lead-ads webhook. Required: the webhooks app
# refuses to start without it.
META_APP_SECRET = os.environ.get("META_APP_SECRET", "")
WEBHOOK_MAX_BODY_BYTES = 1_048_576

# Rate limiter sweep cadence (seconds).
RATE_LIMIT_SWEEP_SECONDS = _env_int("RATE_LIMIT_SWEEP_SECONDS", 60)

# AI collaborator. Without an API key the stub analysis is used.
AI_API_KEY = os.environ.get("AI_API_KEY", "")
AI_API_BASE = os.environ.get("AI_API_BASE", "https://api.x.ai")
AI_MODEL = os.environ.get("AI_MODEL", "grok-2-latest")
AI_TIMEOUT_SECONDS = _env_int("AI_TIMEOUT_SECONDS", 15)

ENRICHMENT_MAX_ATTEMPTS = _env_int("ENRICHMENT_MAX_ATTEMPTS", 3)
ENRICHMENT_INITIAL_DELAY = _env_int("ENRICHMENT_INITIAL_DELAY", 30)
ENRICHMENT_MAX_DELAY = _env_int("ENRICHMENT_MAX_DELAY", 600)
DATA_RETENTION_DAYS = _env_int("DATA_RETENTION_DAYS", 90)

ALLOW_SEEDING = _env_bool("ALLOW_SEEDING")

CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_TASK_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TIMEZONE = TIME_ZONE
CELERY_DATA_RETENTION_SECONDS = _env_int("CELERY_DATA_RETENTION_SECONDS", 24 * 60 * 60)
CELERY_BEAT_SCHEDULE = {
    "enforce-data-retention": {
        "task": "apps.workers.tasks.enforce_data_retention",
        "schedule": timedelta(seconds=CELERY_DATA_RETENTION_SECONDS),
    },
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        },
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "root": {"handlers": ["console"], "level": os.environ.get("LOG_LEVEL", "INFO")},
    "loggers": {
        "opensmile.safe_log": {"level": "INFO"},
    },
}
