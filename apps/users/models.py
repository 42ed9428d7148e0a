"""Database models and helpers for the users app."""

from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class Gender(models.TextChoices):
    MALE = "Male", "Male"
    FEMALE = "Female", "Female"
    OTHER = "Other", "Other"


class User(AbstractUser):
    """Portal account. Doubles as the person referenced by category records."""

    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True)

    def __str__(self) -> str:  # pragma: no cover - human-readable helper
        return self.get_full_name() or self.get_username()


__all__ = ["Gender", "User"]
