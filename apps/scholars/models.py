"""Application and scholar records consumed by the category lifecycle."""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.users.models import Gender

logger = logging.getLogger(__name__)


class ScholarType(models.TextChoices):
    STUDENT_ASSISTANT = "student_assistant", "Student assistant"
    STUDENT_MARSHAL = "student_marshal", "Student marshal"


class Application(models.Model):
    """An applicant's scholarship application."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        UNDER_REVIEW = "under_review", "Under review"
        INTERVIEW_SCHEDULED = "interview_scheduled", "Interview scheduled"
        PASSED_INTERVIEW = "passed_interview", "Passed interview"
        FAILED_INTERVIEW = "failed_interview", "Failed interview"
        TRAINEE = "trainee", "Trainee"
        TRAINING_COMPLETED = "training_completed", "Training completed"
        PENDING_OFFICE_INTERVIEW = "pending_office_interview", "Pending office interview"
        OFFICE_INTERVIEW_SCHEDULED = "office_interview_scheduled", "Office interview scheduled"
        HOURS_COMPLETED = "hours_completed", "Hours completed"
        ACCEPTED = "accepted", "Accepted"
        REJECTED = "rejected", "Rejected"
        WITHDRAWN = "withdrawn", "Withdrawn"
        ON_HOLD = "on_hold", "On hold"

    TRAINING_STATUSES = (
        Status.TRAINEE,
        Status.TRAINING_COMPLETED,
        Status.PENDING_OFFICE_INTERVIEW,
        Status.OFFICE_INTERVIEW_SCHEDULED,
    )
    # Statuses the category lifecycle is allowed to write.
    LIFECYCLE_STATUSES = (Status.WITHDRAWN, Status.REJECTED)

    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="scholar_applications",
    )
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    email = models.EmailField(blank=True)
    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True)
    position = models.CharField(max_length=32, choices=ScholarType.choices)
    office = models.CharField(max_length=255, blank=True)
    status = models.CharField(
        max_length=32,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    submitted_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-submitted_at", "-id")

    def __str__(self) -> str:  # pragma: no cover - human readable representation
        return f"Application {self.pk} ({self.status})"

    def mark_status(self, status: str) -> None:
        """Persist a lifecycle-driven status change."""

        if status not in self.LIFECYCLE_STATUSES:
            raise ValueError(f"Unsupported lifecycle status for application: {status}")
        self.status = status
        self.save(update_fields=["status", "updated_at"])
        logger.info(
            "Application %s marked %s",
            self.pk,
            status,
            extra={
                "context": {
                    "action": "application.status_changed",
                    "application_id": self.pk,
                    "status": status,
                }
            },
        )


class Scholar(models.Model):
    """A deployed scholar serving in an office."""

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        COMPLETED = "completed", "Completed"

    LIFECYCLE_STATUSES = (Status.COMPLETED, Status.INACTIVE)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="scholar_records",
    )
    application = models.ForeignKey(
        Application,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="scholars",
    )
    scholar_type = models.CharField(max_length=32, choices=ScholarType.choices)
    office = models.CharField(max_length=255, db_index=True)
    deployed_at = models.DateTimeField(default=timezone.now)
    semester_start_date = models.DateTimeField(blank=True, null=True)
    semester_end_date = models.DateTimeField(blank=True, null=True)
    semester_months = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-deployed_at", "-id")

    def __str__(self) -> str:  # pragma: no cover - human readable representation
        return f"Scholar {self.pk} ({self.status})"

    @property
    def service_window(self):
        """Return the recorded ``(start, end)`` of the scholar's service."""

        return (self.semester_start_date or self.deployed_at, self.semester_end_date)

    def mark_status(self, status: str, *, ended_at=None) -> None:
        """Persist a lifecycle-driven status change."""

        if status not in self.LIFECYCLE_STATUSES:
            raise ValueError(f"Unsupported lifecycle status for scholar: {status}")
        self.status = status
        update_fields = ["status", "updated_at"]
        if ended_at is not None:
            self.semester_end_date = ended_at
            update_fields.append("semester_end_date")
        self.save(update_fields=update_fields)
        logger.info(
            "Scholar %s marked %s",
            self.pk,
            status,
            extra={
                "context": {
                    "action": "scholar.status_changed",
                    "scholar_id": self.pk,
                    "status": status,
                }
            },
        )


__all__ = ["Application", "Scholar", "ScholarType"]
