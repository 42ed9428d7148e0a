"""Expiry rules for withdrawn and time-limited blacklist records.

Expiry is a pure function of the stored timestamps and the instant being
asked about. The scheduled sweep, the blacklist gate and the listings all use
the predicates below, so they agree on what "expired" means whether or not a
sweep has run yet.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.db.models import Q

from .constants import PERMANENT_RESTRICTION, Category

DEFAULT_WITHDRAWAL_EXPIRY_MONTHS = 3


def add_months(moment: datetime, months: int) -> datetime:
    """Shift ``moment`` by whole calendar months, clamping to month end."""

    return moment + relativedelta(months=months)


def withdrawal_expiry_months() -> int:
    return getattr(
        settings,
        "CATEGORY_WITHDRAWAL_EXPIRY_MONTHS",
        DEFAULT_WITHDRAWAL_EXPIRY_MONTHS,
    )


def withdrawal_expiry(withdrawn_at: datetime) -> datetime:
    """Return when a withdrawal recorded at ``withdrawn_at`` lapses."""

    return add_months(withdrawn_at, withdrawal_expiry_months())


def blacklist_expiry(blacklisted_at: datetime, restriction_period: int) -> Optional[datetime]:
    """Return when a blacklist entry lapses, or ``None`` for permanent entries."""

    if restriction_period <= PERMANENT_RESTRICTION:
        return None
    return add_months(blacklisted_at, restriction_period)


def is_permanent(record) -> bool:
    return (
        record.restriction_period == PERMANENT_RESTRICTION
        or record.blacklist_expires_at is None
    )


def is_expired(record, now: datetime) -> bool:
    """Return ``True`` when ``record`` is past its expiry at ``now``."""

    if record.category == Category.WITHDRAWN:
        return record.expires_at is not None and record.expires_at <= now
    if record.category == Category.BLACKLISTED:
        return (
            record.restriction_period > PERMANENT_RESTRICTION
            and record.blacklist_expires_at is not None
            and record.blacklist_expires_at <= now
        )
    return False


def expired_withdrawn_q(now: datetime) -> Q:
    return Q(category=Category.WITHDRAWN, expires_at__lte=now)


def expired_blacklist_q(now: datetime) -> Q:
    return Q(
        category=Category.BLACKLISTED,
        restriction_period__gt=PERMANENT_RESTRICTION,
        blacklist_expires_at__lte=now,
    )


def expired_q(now: datetime) -> Q:
    """Database predicate matching exactly the rows ``is_expired`` accepts."""

    return expired_withdrawn_q(now) | expired_blacklist_q(now)


__all__ = [
    "add_months",
    "blacklist_expiry",
    "expired_blacklist_q",
    "expired_q",
    "expired_withdrawn_q",
    "is_expired",
    "is_permanent",
    "withdrawal_expiry",
    "withdrawal_expiry_months",
]
