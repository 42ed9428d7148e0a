"""Development settings for the scholar portal.

Reads a ``.env`` file at the project root so local database and broker URLs
do not need to be exported by hand.
"""
from __future__ import annotations

import logging
import os

import environ

from .base import *  # noqa: F401,F403
from .base import (
    BASE_DIR,
    build_allowed_hosts,
    build_database_config,
    get_csrf_trusted_origins,
    get_env_bool,
    get_secret_key,
)

env = environ.Env()
environ.Env.read_env(os.path.join(BASE_DIR, ".env"))

DEBUG = get_env_bool("DJANGO_DEBUG", default=True)
SECRET_KEY = get_secret_key(DEBUG)

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

ALLOWED_HOSTS = build_allowed_hosts(
    "DEV_ALLOWED_HOSTS",
    "ALLOWED_HOSTS",
    default=("localhost", "127.0.0.1"),
)

CSRF_TRUSTED_ORIGINS = get_csrf_trusted_origins(
    "DEV_CSRF_TRUSTED_ORIGINS",
    default=("http://localhost", "http://127.0.0.1"),
)

DATABASES = {
    "default": build_database_config(
        "DEV_DATABASE_URL",
        fallback_env_vars=("DATABASE_URL",),
        default_url=env.str("DEV_DEFAULT_DATABASE_URL", default="sqlite:///db.sqlite3"),
        test_env_vars=("DEV_TEST_DATABASE_URL", "TEST_DATABASE_URL"),
    )
}

logging.getLogger(__name__).info(
    "Using database engine: %s | Name: %s",
    DATABASES["default"].get("ENGINE"),
    DATABASES["default"].get("NAME"),
)

SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False
SECURE_HSTS_SECONDS = 0
