"""Celery tasks for the category lifecycle."""

from __future__ import annotations

from typing import Any

from celery import shared_task
from celery.utils.log import get_task_logger

from .services import cleanup

logger = get_task_logger(__name__)


@shared_task(name="categories.cleanup_expired_records")
def cleanup_expired_records() -> dict[str, Any]:
    """Remove expired withdrawn and time-limited blacklist records."""

    result = cleanup()
    if result.failed_phases:
        logger.warning(
            "Category cleanup finished with failed phases: %s",
            ", ".join(result.failed_phases),
        )
    return result.as_dict()


__all__ = ["cleanup_expired_records"]
