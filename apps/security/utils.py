"""Helper functions for recording audit trail events."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from django.contrib.auth.models import AbstractBaseUser
from django.http import HttpRequest
from django.utils.encoding import force_str
from django.utils.functional import Promise

from .models import AuditLog


def _serialise_context(context: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    if not context:
        return {}

    serialised: dict[str, Any] = {}
    for key, value in context.items():
        if isinstance(value, Promise):
            value = force_str(value)
        elif isinstance(value, (list, tuple)):
            value = [force_str(item) if isinstance(item, Promise) else item for item in value]
        elif hasattr(value, "isoformat"):
            value = value.isoformat()
        serialised[key] = value
    return serialised


def _derive_client_ip(request: Optional[HttpRequest]) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def _resolve_user(user: Optional[AbstractBaseUser], request: Optional[HttpRequest]):
    if user is not None:
        return user
    if request is not None:
        candidate = getattr(request, "user", None)
        if getattr(candidate, "is_authenticated", False):
            return candidate
    return user


def _resolve_role(user: Optional[AbstractBaseUser], resolved_role: Optional[str]) -> str:
    if resolved_role:
        return resolved_role
    if user is None or not getattr(user, "is_authenticated", False):
        return "system"
    if getattr(user, "is_superuser", False):
        return "admin"
    if getattr(user, "is_staff", False):
        return "staff"
    return "user"


def log_audit_event(
    *,
    action_code: str,
    request: Optional[HttpRequest] = None,
    user: Optional[AbstractBaseUser] = None,
    target: str = "",
    context: Optional[Mapping[str, Any]] = None,
    endpoint: Optional[str] = None,
    client_ip: Optional[str] = None,
    resolved_role: Optional[str] = None,
) -> AuditLog:
    """Persist an audit log entry with normalised metadata."""

    resolved_user = _resolve_user(user, request)
    role = _resolve_role(resolved_user, resolved_role)
    ip_address = client_ip or _derive_client_ip(request)
    endpoint_value = endpoint or (request.get_full_path() if request else "")

    return AuditLog.objects.create(
        user=resolved_user if getattr(resolved_user, "is_authenticated", False) else None,
        resolved_role=role,
        action_code=action_code,
        target=target,
        endpoint=endpoint_value,
        client_ip=ip_address,
        context=_serialise_context(context),
    )


__all__ = ["log_audit_event"]
