"""
Django settings.py — DEV/PROD profiles for the live components project,
with optional Sentry and DATABASE_URL (dj-database-url) support.
"""

from __future__ import annotations
import os
from pathlib import Path

import dj_database_url
import sentry_sdk
from dotenv import load_dotenv
from sentry_sdk.integrations.django import DjangoIntegration

# ────────────────────────────────────────────────────
# Paths & .env
# ────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")
ENV = os.getenv


def env_bool(key: str, default: str = "false") -> bool:
    return ENV(key, default).lower() in {"1", "true", "yes", "on"}


def env_int(key: str, default: int) -> int:
    raw = ENV(key)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer, got {raw!r}") from None


# ────────────────────────────────────────────────────
# Core flags & secret
# ────────────────────────────────────────────────────
DEBUG: bool = env_bool("DEBUG")

SECRET_KEY = ENV("SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY environment variable is required")

# ────────────────────────────────────────────────────
# Sentry (error monitoring)
# ────────────────────────────────────────────────────
SENTRY_DSN = ENV("SENTRY_DSN", "")
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[DjangoIntegration()],
        traces_sample_rate=float(ENV("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
        sample_rate=float(ENV("SENTRY_SAMPLE_RATE", "1.0")),
        send_default_pii=False,
    )

# ────────────────────────────────────────────────────
# Hosts & CSRF trusted origins
# ────────────────────────────────────────────────────
ALLOWED_HOSTS = ["localhost", "127.0.0.1"]
CSRF_TRUSTED_ORIGINS = ["http://localhost:8000", "http://127.0.0.1:8000"]


def _extend_from_env_list(env_key: str, target_list: list[str], require_scheme: bool = False) -> None:
    raw = ENV(env_key, "") or ""
    if not raw:
        return
    for item in [x.strip() for x in raw.split(",") if x.strip()]:
        if require_scheme and not (item.startswith("http://") or item.startswith("https://")):
            continue
        target_list.append(item)


_extend_from_env_list("EXTRA_ALLOWED_HOSTS", ALLOWED_HOSTS, require_scheme=False)
_extend_from_env_list("EXTRA_CSRF_TRUSTED_ORIGINS", CSRF_TRUSTED_ORIGINS, require_scheme=True)

# ────────────────────────────────────────────────────
# Apps & Middleware
# ────────────────────────────────────────────────────
INSTALLED_APPS = [
    # Django
    "django.contrib.auth", "django.contrib.contenttypes",
    "django.contrib.sessions", "django.contrib.messages", "django.contrib.staticfiles",
    # Project
    "live_component",
    "demo",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "livecomponents_site.urls"
WSGI_APPLICATION = "livecomponents_site.wsgi.application"

# ────────────────────────────────────────────────────
# Templates
# ────────────────────────────────────────────────────
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

# ────────────────────────────────────────────────────
# Database (DATABASE_URL preferred; fallback SQLite)
# ────────────────────────────────────────────────────
DATABASE_URL = ENV("DATABASE_URL")
if DATABASE_URL:
    DATABASES = {
        "default": dj_database_url.parse(
            DATABASE_URL,
            conn_max_age=env_int("DB_CONN_MAX_AGE", 600),
        )
    }
else:
    DATABASES = {
        "default": {"ENGINE": "django.db.backends.sqlite3", "NAME": BASE_DIR / "db.sqlite3"}
    }

CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "livecomponents-cache"}}

# ────────────────────────────────────────────────────
# I18N
# ────────────────────────────────────────────────────
LANGUAGE_CODE = "en-gb"
TIME_ZONE = ENV("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ────────────────────────────────────────────────────
# Live components
# ────────────────────────────────────────────────────
# Lifetime of the tokens rendered in ``data-live-csrf-value``.
LIVE_COMPONENT_CSRF_MAX_AGE = env_int("LIVE_COMPONENT_CSRF_MAX_AGE", 60 * 60 * 12)
LIVE_COMPONENT_JSON_MEDIA_TYPE = ENV(
    "LIVE_COMPONENT_JSON_MEDIA_TYPE", "application/vnd.live-component+json"
)
# Dev-server access lines of live requests below this level are dropped.
LIVE_COMPONENT_QUIET_LEVEL = ENV("LIVE_COMPONENT_QUIET_LEVEL", "WARNING")

# ────────────────────────────────────────────────────
# Security profiles (DEV/PROD)
# ────────────────────────────────────────────────────
SESSION_COOKIE_SAMESITE = ENV("SESSION_COOKIE_SAMESITE", "Lax")
CSRF_COOKIE_SAMESITE = ENV("CSRF_COOKIE_SAMESITE", "Lax")

if DEBUG:
    SECURE_SSL_REDIRECT = False
    SESSION_COOKIE_SECURE = False
    CSRF_COOKIE_SECURE = False
else:
    SECURE_SSL_REDIRECT = env_bool("SECURE_SSL_REDIRECT", "true")
    SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
    SECURE_HSTS_SECONDS = 31536000
    SECURE_CONTENT_TYPE_NOSNIFF = True
    X_FRAME_OPTIONS = "DENY"
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True

# ────────────────────────────────────────────────────
# Logging
# ────────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(levelname)s %(name)s: %(message)s"},
    },
    "filters": {
        "live_requests": {"()": "live_component.log.LiveRequestFilter"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "level": "DEBUG", "formatter": "simple"},
        "null": {"class": "logging.NullHandler"},
    },
    "root": {"handlers": ["console"] if DEBUG else ["null"], "level": "DEBUG" if DEBUG else "INFO"},
    "loggers": {
        "django.server": {
            "handlers": ["console"] if DEBUG else ["null"],
            "filters": ["live_requests"],
            "level": "INFO",
            "propagate": False,
        },
        "django.security": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
        "live_component": {
            "level": ENV("LIVE_COMPONENT_LOG_LEVEL", "DEBUG" if DEBUG else "WARNING"),
            "propagate": True,
        },
    },
}
