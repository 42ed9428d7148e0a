"""Models backing the audit trail and the persisted application log."""

from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """Record of administrative category actions triggered by users or systems."""

    class ActionCode(models.TextChoices):
        CATEGORY_GRADUATED = "category_graduated", "Graduated and archived scholar"
        CATEGORY_WITHDRAWN = "category_withdrawn", "Withdrew applicant"
        CATEGORY_BLACKLISTED = "category_blacklisted", "Blacklisted person"
        BLACKLIST_REMOVED = "blacklist_removed", "Removed person from blacklist"
        CATEGORY_CLEANUP = "category_cleanup", "Ran expired category cleanup"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="security_audit_logs",
        null=True,
        blank=True,
    )
    resolved_role = models.CharField(max_length=32, blank=True)
    action_code = models.CharField(max_length=64, choices=ActionCode.choices)
    target = models.CharField(max_length=255, blank=True)
    endpoint = models.CharField(max_length=255, blank=True)
    client_ip = models.GenericIPAddressField(blank=True, null=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    context = models.JSONField(blank=True, default=dict)

    class Meta:
        ordering = ("-timestamp", "-id")

    def __str__(self) -> str:  # pragma: no cover - human readable representation
        identifier = self.user or "system"
        return f"{self.timestamp:%Y-%m-%d %H:%M:%S} - {identifier} - {self.action_code}"


class LogEntry(models.Model):
    """Persisted application log record for staff observability."""

    LEVEL_CHOICES = [
        ("DEBUG", "Debug"),
        ("INFO", "Info"),
        ("WARNING", "Warning"),
        ("ERROR", "Error"),
        ("CRITICAL", "Critical"),
    ]

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    logger_name = models.CharField(max_length=255, db_index=True)
    level = models.CharField(max_length=16, choices=LEVEL_CHOICES)
    message = models.TextField()
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="log_entries",
    )
    context = models.JSONField(blank=True, null=True)

    class Meta:
        ordering = ("-timestamp", "-id")

    def __str__(self) -> str:  # pragma: no cover - human readable representation
        return f"[{self.level}] {self.logger_name}: {self.message[:75]}"
