"""Read-only listings, dashboard counts and report data for the category archive
and the current scholar and trainee rosters."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Mapping, Optional

from django.conf import settings
from django.db.models import Count, Q, QuerySet
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.scholars.models import Application, Scholar, ScholarType
from apps.users.models import Gender

from .constants import PERMANENT_RESTRICTION, Category
from .exceptions import InvalidRequest
from .expiry import expired_q
from .models import CategoryRecord

_ORDERING = {
    Category.GRADUATED.value: ("-graduation_date", "-id"),
    Category.WITHDRAWN.value: ("-withdrawal_date", "-id"),
    Category.BLACKLISTED.value: ("-blacklist_date", "-id"),
}
_DEFAULT_ORDERING = ("-category_changed_at", "-id")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return (_clean(value) or "").lower() in _TRUE_VALUES


def _parse_moment(value: Any, *, end_of_day: bool) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    raw = _clean(value)
    if raw is None:
        return None

    try:
        day = parse_date(raw)
        moment = None if day else parse_datetime(raw)
    except ValueError as exc:
        raise InvalidRequest(f"Invalid date: {raw}") from exc
    if day is not None:
        moment = datetime.combine(day, time.max if end_of_day else time.min)
    elif moment is None:
        raise InvalidRequest(f"Invalid date: {raw}")
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


@dataclass(frozen=True)
class CategoryFilters:
    category: Optional[str] = None
    office: Optional[str] = None
    scholar_type: Optional[str] = None
    academic_year: Optional[str] = None
    search: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    include_expired: bool = False

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "CategoryFilters":
        """Build filters from request query parameters.

        ``category`` may be ``"all"`` or empty to match every category.
        Plain dates in ``date_to`` cover the whole day.
        """

        category = _clean(params.get("category"))
        if category == "all":
            category = None
        if category is not None and category not in Category.values:
            raise InvalidRequest(f"Unknown category: {category}")

        return cls(
            category=category,
            office=_clean(params.get("office")),
            scholar_type=_clean(params.get("scholar_type")),
            academic_year=_clean(params.get("academic_year")),
            search=_clean(params.get("search")),
            date_from=_parse_moment(params.get("date_from"), end_of_day=False),
            date_to=_parse_moment(params.get("date_to"), end_of_day=True),
            include_expired=_parse_bool(params.get("include_expired")),
        )


@dataclass(frozen=True)
class CategoryPage:
    """One page of category records, scholars or trainees."""

    records: list[Any]
    total: int
    page: int
    limit: int
    total_pages: int


@dataclass(frozen=True)
class CategoryReport:
    records: list[CategoryRecord]
    summary: dict[str, Any]


def filtered_records(filters: CategoryFilters, *, now: Optional[datetime] = None) -> QuerySet:
    """Return the unordered queryset matching ``filters``."""

    queryset = CategoryRecord.objects.select_related("added_by")

    if filters.category:
        queryset = queryset.filter(category=filters.category)
    if filters.office:
        queryset = queryset.filter(scholar_office=filters.office)
    if filters.scholar_type:
        queryset = queryset.filter(scholar_type=filters.scholar_type)
    if filters.academic_year:
        queryset = queryset.filter(academic_year=filters.academic_year)
    if filters.search:
        queryset = queryset.filter(
            Q(first_name__icontains=filters.search)
            | Q(last_name__icontains=filters.search)
            | Q(email__icontains=filters.search)
        )
    if filters.date_from:
        queryset = queryset.filter(category_changed_at__gte=filters.date_from)
    if filters.date_to:
        queryset = queryset.filter(category_changed_at__lte=filters.date_to)
    if not filters.include_expired:
        queryset = queryset.exclude(expired_q(now or timezone.now()))

    return queryset


def clamp_limit(limit: Optional[int]) -> int:
    default = getattr(settings, "CATEGORY_DEFAULT_PAGE_SIZE", 20)
    maximum = getattr(settings, "CATEGORY_MAX_PAGE_SIZE", 100)
    if not limit or limit < 1:
        return default
    return min(limit, maximum)


def list_by_category(
    filters: CategoryFilters,
    page: int = 1,
    limit: Optional[int] = None,
    *,
    now: Optional[datetime] = None,
) -> CategoryPage:
    """Return one page of records matching ``filters``.

    Expired records are left out unless ``filters.include_expired`` is set,
    so the listing agrees with the gate even before the sweep has run.
    """

    ordering = _ORDERING.get(filters.category, _DEFAULT_ORDERING)
    return _paginate(filtered_records(filters, now=now).order_by(*ordering), page, limit)


def _paginate(queryset: QuerySet, page: Optional[int], limit: Optional[int]) -> CategoryPage:
    limit = clamp_limit(limit)
    page = max(page or 1, 1)

    total = queryset.count()
    offset = (page - 1) * limit
    return CategoryPage(
        records=list(queryset[offset : offset + limit]),
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )


def _scholar_type(value: Any, field: str) -> Optional[str]:
    value = _clean(value)
    if value is not None and value not in ScholarType.values:
        raise InvalidRequest(f"Unknown {field}: {value}")
    return value


def list_active_scholars(
    *,
    office: Optional[str] = None,
    scholar_type: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> CategoryPage:
    """Return one page of scholars currently serving, latest deployment first.

    ``search`` matches the scholar's account name or email and is applied
    before paging, so ``total`` always counts the matching scholars.
    """

    scholar_type = _scholar_type(scholar_type, "scholar type")
    office, search = _clean(office), _clean(search)

    queryset = Scholar.objects.filter(status=Scholar.Status.ACTIVE).select_related("user")
    if office:
        queryset = queryset.filter(office=office)
    if scholar_type:
        queryset = queryset.filter(scholar_type=scholar_type)
    if search:
        queryset = queryset.filter(
            Q(user__first_name__icontains=search)
            | Q(user__last_name__icontains=search)
            | Q(user__email__icontains=search)
        )
    return _paginate(queryset.order_by("-deployed_at", "-id"), page, limit)


def list_trainees(
    *,
    office: Optional[str] = None,
    position: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> CategoryPage:
    """Return one page of applications in a training status, most recently updated first."""

    position = _scholar_type(position, "position")
    office, search = _clean(office), _clean(search)

    queryset = Application.objects.filter(
        status__in=Application.TRAINING_STATUSES
    ).select_related("applicant")
    if office:
        queryset = queryset.filter(office=office)
    if position:
        queryset = queryset.filter(position=position)
    if search:
        queryset = queryset.filter(
            Q(first_name__icontains=search)
            | Q(last_name__icontains=search)
            | Q(email__icontains=search)
        )
    return _paginate(queryset.order_by("-updated_at", "-id"), page, limit)


def category_stats(now: Optional[datetime] = None, days: Optional[int] = None) -> dict[str, int]:
    """Return dashboard counts per category plus soon-to-expire entries."""

    now = now or timezone.now()
    if days is None:
        days = getattr(settings, "CATEGORY_EXPIRY_WARNING_DAYS", 3)
    horizon = now + timedelta(days=days)

    counts = CategoryRecord.objects.exclude(expired_q(now)).aggregate(
        active=Count("pk", filter=Q(category=Category.ACTIVE)),
        graduated=Count("pk", filter=Q(category=Category.GRADUATED)),
        withdrawn=Count("pk", filter=Q(category=Category.WITHDRAWN)),
        blacklisted=Count("pk", filter=Q(category=Category.BLACKLISTED)),
        withdrawn_expiring_soon=Count(
            "pk",
            filter=Q(
                category=Category.WITHDRAWN,
                expires_at__gt=now,
                expires_at__lte=horizon,
            ),
        ),
        blacklist_expiring_soon=Count(
            "pk",
            filter=Q(
                category=Category.BLACKLISTED,
                restriction_period__gt=PERMANENT_RESTRICTION,
                blacklist_expires_at__gt=now,
                blacklist_expires_at__lte=horizon,
            ),
        ),
    )
    counts["scholars"] = Scholar.objects.filter(status=Scholar.Status.ACTIVE).count()
    counts["trainees"] = Application.objects.filter(
        status__in=Application.TRAINING_STATUSES
    ).count()
    return counts


def report_data(filters: CategoryFilters, *, now: Optional[datetime] = None) -> CategoryReport:
    """Return every matching record with a summary for printable reports."""

    queryset = filtered_records(filters, now=now)
    totals = queryset.order_by().aggregate(
        total=Count("pk"),
        graduated=Count("pk", filter=Q(category=Category.GRADUATED)),
        withdrawn=Count("pk", filter=Q(category=Category.WITHDRAWN)),
        blacklisted=Count("pk", filter=Q(category=Category.BLACKLISTED)),
        male=Count("pk", filter=Q(gender=Gender.MALE)),
        female=Count("pk", filter=Q(gender=Gender.FEMALE)),
        student_assistant=Count("pk", filter=Q(scholar_type=ScholarType.STUDENT_ASSISTANT)),
        student_marshal=Count("pk", filter=Q(scholar_type=ScholarType.STUDENT_MARSHAL)),
    )
    summary = {
        "total": totals["total"],
        "by_category": {
            "graduated": totals["graduated"],
            "withdrawn": totals["withdrawn"],
            "blacklisted": totals["blacklisted"],
        },
        "by_gender": {"male": totals["male"], "female": totals["female"]},
        "by_type": {
            "student_assistant": totals["student_assistant"],
            "student_marshal": totals["student_marshal"],
        },
    }
    records = list(queryset.order_by(*_DEFAULT_ORDERING))
    return CategoryReport(records=records, summary=summary)


def academic_years() -> list[str]:
    years = (
        CategoryRecord.objects.graduated()
        .exclude(academic_year="")
        .order_by()
        .values_list("academic_year", flat=True)
        .distinct()
    )
    return sorted(years, reverse=True)


__all__ = [
    "CategoryFilters",
    "CategoryPage",
    "CategoryReport",
    "academic_years",
    "category_stats",
    "clamp_limit",
    "filtered_records",
    "list_active_scholars",
    "list_by_category",
    "list_trainees",
    "report_data",
]
