"""Health check view for uptime monitoring."""
from __future__ import annotations

from django.db import DatabaseError, connections
from django.http import JsonResponse

from apps.categories.models import CategoryRecord


def health_view(request):
    """Return service health plus the backlog of expired category records.

    A growing backlog means the scheduled cleanup sweep is not running.
    """
    payload = {"status": "ok"}

    connection = connections["default"]
    try:
        connection.ensure_connection()
        payload["database"] = "ok" if connection.is_usable() else "unavailable"
        payload["expired_backlog"] = CategoryRecord.objects.expired().count()
    except DatabaseError:
        payload["status"] = "degraded"
        payload["database"] = "unavailable"

    status_code = 200 if payload["status"] == "ok" else 503
    return JsonResponse(payload, status=status_code)
