"""Category values shared by the lifecycle modules."""

from django.db import models


class Category(models.TextChoices):
    """Mutually exclusive standing of a person in the scholarship programme."""

    ACTIVE = "active", "Active"
    GRADUATED = "graduated", "Graduated"
    WITHDRAWN = "withdrawn", "Withdrawn"
    BLACKLISTED = "blacklisted", "Blacklisted"


PERMANENT_RESTRICTION = 0
"""Restriction period (in months) marking a blacklist entry that never expires."""
