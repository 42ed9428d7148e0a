"""Database logging for the category lifecycle.

Transition, gate and sweep log lines carry a ``context`` dict whose ``action``
key (``category.withdrawn``, ``category.gate_purge_failed`` and so on) lets
staff filter ``LogEntry`` rows by what happened. The acting staff member is
attached through ``extra={"user": ...}`` and becomes the entry's user.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model

# Attributes every LogRecord carries; anything else came from ``extra``.
_BUILTIN_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
}
_HANDLED_EXTRAS = {"context", "user"}


class DatabaseLogHandler(logging.Handler):
    """Write each record to ``LogEntry`` with its context and acting user."""

    _traceback_formatter = logging.Formatter()

    def emit(self, record: logging.LogRecord) -> None:
        from .models import LogEntry

        try:
            LogEntry.objects.create(
                logger_name=record.name,
                level=record.levelname.upper(),
                message=record.getMessage(),
                user=self._actor(record),
                context=self._context(record),
            )
        except Exception:  # pragma: no cover - logging must never raise
            self.handleError(record)

    def _context(self, record: logging.LogRecord) -> Optional[Dict[str, Any]]:
        context: Dict[str, Any] = {}
        supplied = getattr(record, "context", None)
        if isinstance(supplied, dict):
            context.update(_jsonable(supplied))

        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _BUILTIN_RECORD_ATTRS
            and key not in _HANDLED_EXTRAS
            and not key.startswith("_")
        }
        context.update(_jsonable(extras))

        # Swallowed failures (a stale gate entry that could not be purged, a
        # failed sweep phase) keep their traceback for later diagnosis.
        if record.exc_info:
            context["exception"] = self._traceback_formatter.formatException(record.exc_info)

        return context or None

    def _actor(self, record: logging.LogRecord):
        actor = getattr(record, "user", None)
        if actor is not None and getattr(actor, "pk", None):
            return actor

        actor_id = getattr(record, "user_id", None)
        if not actor_id:
            return None
        return get_user_model()._default_manager.filter(pk=actor_id).first()


def _jsonable(value: Any) -> Any:
    """Reduce ``value`` to something ``JSONField`` can store."""

    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(item) for item in value]
    if hasattr(value, "pk"):
        return value.pk
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


__all__ = ["DatabaseLogHandler"]
