"""Archival category records for graduated, withdrawn and blacklisted people."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.scholars.models import ScholarType
from apps.users.models import Gender

from .constants import PERMANENT_RESTRICTION, Category
from .exceptions import InvalidCategoryState, ProtectedRecordError
from .expiry import blacklist_expiry, expired_q, is_expired, withdrawal_expiry

PROTECTED_RECORDS = Q(is_protected=True) | Q(category=Category.GRADUATED)
PROTECTED_DELETE_MESSAGE = "Cannot delete protected archived records"


class CategoryRecordQuerySet(models.QuerySet):
    def expired(self, now: Optional[datetime] = None):
        return self.filter(expired_q(now or timezone.now()))

    def unexpired(self, now: Optional[datetime] = None):
        return self.exclude(expired_q(now or timezone.now()))

    def blacklisted(self):
        return self.filter(category=Category.BLACKLISTED)

    def withdrawn(self):
        return self.filter(category=Category.WITHDRAWN)

    def graduated(self):
        return self.filter(category=Category.GRADUATED)

    def delete(self):
        if self.filter(PROTECTED_RECORDS).exists():
            raise ProtectedRecordError(PROTECTED_DELETE_MESSAGE)
        return super().delete()

    delete.alters_data = True
    delete.queryset_only = True


class CategoryRecord(models.Model):
    """Snapshot of a person at the moment their category changed.

    Name, email, gender, type and office are copied when the record is
    created and never re-synchronised with the person or application
    afterwards. Graduated records are protected and can never be deleted.
    """

    Category = Category

    person = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="category_records",
    )
    application = models.ForeignKey(
        "scholars.Application",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="category_records",
    )
    scholar = models.ForeignKey(
        "scholars.Scholar",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="category_records",
    )
    category = models.CharField(max_length=16, choices=Category.choices, db_index=True)

    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    email = models.EmailField(db_index=True)
    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True)
    scholar_type = models.CharField(max_length=32, choices=ScholarType.choices, blank=True)
    scholar_office = models.CharField(max_length=255, blank=True, db_index=True)
    total_service_months = models.PositiveIntegerField(default=0)
    completed_hours = models.FloatField(default=0)
    start_date = models.DateTimeField(blank=True, null=True)
    end_date = models.DateTimeField(blank=True, null=True)

    category_changed_at = models.DateTimeField(default=timezone.now)

    graduation_date = models.DateTimeField(blank=True, null=True, db_index=True)
    academic_year = models.CharField(max_length=16, blank=True)

    withdrawal_reason = models.TextField(blank=True)
    withdrawal_date = models.DateTimeField(blank=True, null=True)
    expires_at = models.DateTimeField(blank=True, null=True, db_index=True)

    blacklist_reason = models.TextField(blank=True)
    blacklist_date = models.DateTimeField(blank=True, null=True)
    restriction_period = models.PositiveIntegerField(
        default=PERMANENT_RESTRICTION,
        help_text="Restriction length in months. 0 means permanent.",
    )
    blacklist_expires_at = models.DateTimeField(blank=True, null=True, db_index=True)

    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="category_records_added",
    )
    notes = models.TextField(blank=True)
    is_protected = models.BooleanField(default=False, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CategoryRecordQuerySet.as_manager()

    class Meta:
        ordering = ("-category_changed_at", "-id")
        constraints = [
            models.UniqueConstraint(
                fields=("person",),
                condition=Q(category="blacklisted"),
                name="categories_single_blacklist_per_person",
            ),
            models.UniqueConstraint(
                fields=("application",),
                condition=Q(category="withdrawn"),
                name="categories_single_withdrawal_per_application",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - human readable representation
        return f"{self.full_name} ({self.category})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._stored_category = instance.__dict__.get("category")
        return instance

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return is_expired(self, now or timezone.now())

    def save(self, *args, **kwargs):
        stored = getattr(self, "_stored_category", None)
        if stored is not None and stored != self.category:
            raise InvalidCategoryState("A record's category cannot change once stored")

        self.is_protected = self.category == Category.GRADUATED
        self.email = (self.email or "").strip().lower()

        if self.category == Category.WITHDRAWN:
            if self.withdrawal_date is None:
                self.withdrawal_date = self.category_changed_at
            if self.expires_at is None:
                self.expires_at = withdrawal_expiry(self.withdrawal_date)
        elif self.category == Category.BLACKLISTED:
            if self.blacklist_date is None:
                self.blacklist_date = self.category_changed_at
            self.blacklist_expires_at = blacklist_expiry(
                self.blacklist_date, self.restriction_period
            )

        super().save(*args, **kwargs)
        self._stored_category = self.category

    def delete(self, *args, **kwargs):
        if self.is_protected or self.category == Category.GRADUATED:
            raise ProtectedRecordError(PROTECTED_DELETE_MESSAGE)
        return super().delete(*args, **kwargs)


__all__ = ["Category", "CategoryRecord", "CategoryRecordQuerySet", "PROTECTED_RECORDS"]
