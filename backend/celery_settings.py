"""Celery configuration read from the environment."""
from __future__ import annotations

import os
from typing import Final

from celery.schedules import crontab


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Return a boolean representation for an environment variable."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _parse_crontab(name: str, default_spec: str):
    """Return a Celery crontab schedule from a five-field cron env var."""

    value = os.getenv(name, default_spec)
    parts = value.split()
    if len(parts) != 5:
        parts = default_spec.split()
    minute, hour, day_of_month, month_of_year, day_of_week = parts
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


CELERY_BROKER_URL: Final[str] = os.getenv(
    "CELERY_BROKER_URL",
    os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0"),
)
CELERY_RESULT_BACKEND: Final[str | None] = os.getenv(
    "CELERY_RESULT_BACKEND",
    CELERY_BROKER_URL,
)
CELERY_TASK_DEFAULT_QUEUE: Final[str] = os.getenv(
    "CELERY_TASK_DEFAULT_QUEUE",
    "scholar_portal",
)
CELERY_TASK_ALWAYS_EAGER: Final[bool] = _get_env_bool(
    "CELERY_TASK_ALWAYS_EAGER",
    False,
)
CELERY_TASK_EAGER_PROPAGATES: Final[bool] = _get_env_bool(
    "CELERY_TASK_EAGER_PROPAGATES",
    CELERY_TASK_ALWAYS_EAGER,
)
CELERY_TASK_ACKS_LATE: Final[bool] = _get_env_bool(
    "CELERY_TASK_ACKS_LATE",
    False,
)
CELERY_TASK_SOFT_TIME_LIMIT: Final[int] = int(
    os.getenv("CELERY_TASK_SOFT_TIME_LIMIT", "60")
)
CELERY_TASK_TIME_LIMIT: Final[int] = int(
    os.getenv("CELERY_TASK_TIME_LIMIT", "300")
)

CATEGORY_CLEANUP_SCHEDULE = _parse_crontab("CATEGORY_CLEANUP_CRON", "0 * * * *")

CELERY_BEAT_SCHEDULE: Final[dict[str, dict[str, object]]] = {
    "categories.cleanup_expired_records": {
        "task": "categories.cleanup_expired_records",
        "schedule": CATEGORY_CLEANUP_SCHEDULE,
    },
}

__all__ = [
    "CELERY_BROKER_URL",
    "CELERY_RESULT_BACKEND",
    "CELERY_TASK_DEFAULT_QUEUE",
    "CELERY_TASK_ALWAYS_EAGER",
    "CELERY_TASK_EAGER_PROPAGATES",
    "CELERY_TASK_ACKS_LATE",
    "CELERY_TASK_SOFT_TIME_LIMIT",
    "CELERY_TASK_TIME_LIMIT",
    "CATEGORY_CLEANUP_SCHEDULE",
    "CELERY_BEAT_SCHEDULE",
]
