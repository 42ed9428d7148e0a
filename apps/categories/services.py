"""Category transitions, the blacklist gate and the expiry sweep.

Every transition runs inside its own ``transaction.atomic`` block. Operations
that must keep at most one active record per key (one withdrawal per
application, one blacklist entry per person) lock the key's row with
``select_for_update`` before checking for an existing record, and the partial
unique constraints on ``CategoryRecord`` reject whatever slips past the
check. Expired rows for the key are removed under the same lock so that a
stale entry never blocks a new one.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.scholars.models import Application, Scholar
from apps.security.models import AuditLog
from apps.security.utils import log_audit_event

from .constants import PERMANENT_RESTRICTION, Category
from .exceptions import (
    CategoryConflict,
    InvalidCategoryState,
    InvalidRequest,
    ProtectedRecordError,
    RecordNotFound,
)
from .expiry import (
    blacklist_expiry,
    expired_blacklist_q,
    expired_q,
    expired_withdrawn_q,
    is_expired,
    is_permanent,
    withdrawal_expiry,
)
from .models import PROTECTED_DELETE_MESSAGE, CategoryRecord

if TYPE_CHECKING:  # pragma: no cover - used for type checkers only
    from django.contrib.auth.models import AbstractBaseUser as User
else:  # pragma: no cover - runtime typing fallback
    from typing import Any as User

logger = logging.getLogger(__name__)

ALREADY_WITHDRAWN_MESSAGE = "Application is already in withdrawn status"
ALREADY_BLACKLISTED_MESSAGE = "User is already blacklisted"


@dataclass(frozen=True)
class GateResult:
    """Answer of the blacklist gate for a single person or email."""

    blacklisted: bool
    reason: Optional[str] = None
    is_permanent: Optional[bool] = None
    expires_at: Optional[datetime] = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CleanupResult:
    withdrawn_removed: int = 0
    blacklist_removed: int = 0
    failed_phases: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failed_phases

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _delete_if_exists(queryset: QuerySet) -> int:
    """Delete the matching records and return how many category rows went."""

    _, per_model = queryset.delete()
    return per_model.get(CategoryRecord._meta.label, 0)


def _purge_expired(queryset: QuerySet, now: datetime) -> int:
    return _delete_if_exists(queryset.filter(expired_q(now)))


def _active_withdrawal_for(application: Application, now: datetime) -> Optional[CategoryRecord]:
    existing = CategoryRecord.objects.withdrawn().filter(application=application)
    _purge_expired(existing, now)
    return existing.first()


def _active_blacklist_for(person, now: datetime) -> Optional[CategoryRecord]:
    existing = CategoryRecord.objects.blacklisted().filter(person=person)
    _purge_expired(existing, now)
    return existing.first()


def _insert_active_record(message: str, existing: QuerySet, **fields: Any) -> CategoryRecord:
    """Create a withdrawal or blacklist entry, reporting a lost race as a conflict.

    Only the insert runs under the savepoint, so integrity errors raised by
    the status updates or the audit trail propagate unchanged.
    """

    try:
        with transaction.atomic():
            return CategoryRecord.objects.create(**fields)
    except IntegrityError as exc:
        raise CategoryConflict(message, record=existing.first()) from exc


def _log_transition(message: str, *args: Any, action: str, actor=None, **context: Any) -> None:
    logger.info(
        message,
        *args,
        extra={
            "user": actor,
            "context": {"action": action, **context},
        },
    )


def graduate(
    scholar_id: int,
    *,
    actor: User,
    graduation_date: Optional[datetime] = None,
    academic_year: Optional[str] = None,
    total_service_months: Optional[int] = None,
    completed_hours: Optional[float] = None,
    notes: str = "",
    now: Optional[datetime] = None,
) -> CategoryRecord:
    """Archive a scholar as graduated and mark the scholar completed.

    The resulting record is protected and is never removed by the sweep or
    by any delete path.
    """

    now = now or timezone.now()
    graduated_on = graduation_date or now

    with transaction.atomic():
        try:
            scholar = Scholar.objects.select_related("user").get(pk=scholar_id)
        except Scholar.DoesNotExist as exc:
            raise RecordNotFound("Scholar not found") from exc

        person = scholar.user
        if person is None:
            raise RecordNotFound("User not found for this scholar")

        started_on, _ = scholar.service_window
        record = CategoryRecord.objects.create(
            person=person,
            application_id=scholar.application_id,
            scholar=scholar,
            category=Category.GRADUATED,
            first_name=person.first_name,
            last_name=person.last_name,
            email=person.email,
            gender=person.gender,
            scholar_type=scholar.scholar_type,
            scholar_office=scholar.office,
            total_service_months=(
                total_service_months
                if total_service_months is not None
                else scholar.semester_months or 0
            ),
            completed_hours=completed_hours or 0,
            start_date=started_on or graduated_on,
            end_date=graduated_on,
            category_changed_at=now,
            graduation_date=graduated_on,
            academic_year=academic_year or str(now.year),
            added_by=actor,
            notes=notes or "",
        )
        scholar.mark_status(Scholar.Status.COMPLETED, ended_at=graduated_on)

        log_audit_event(
            action_code=AuditLog.ActionCode.CATEGORY_GRADUATED,
            user=actor,
            target=f"scholar:{scholar.pk}",
            context={
                "record_id": record.pk,
                "person_id": person.pk,
                "graduation_date": graduated_on,
                "academic_year": record.academic_year,
            },
        )

    _log_transition(
        "Scholar %s graduated and archived as record %s",
        scholar.pk,
        record.pk,
        action="category.graduated",
        actor=actor,
        record_id=record.pk,
        scholar_id=scholar.pk,
    )
    return record


def withdraw(
    application_id: int,
    *,
    actor: User,
    reason: str,
    notes: str = "",
    now: Optional[datetime] = None,
) -> CategoryRecord:
    """Record an applicant's withdrawal, expiring after the configured window."""

    now = now or timezone.now()

    with transaction.atomic():
        try:
            application = Application.objects.select_for_update().get(pk=application_id)
        except Application.DoesNotExist as exc:
            raise RecordNotFound("Application not found") from exc

        existing = _active_withdrawal_for(application, now)
        if existing is not None:
            raise CategoryConflict(ALREADY_WITHDRAWN_MESSAGE, record=existing)

        applicant = application.applicant
        record = _insert_active_record(
            ALREADY_WITHDRAWN_MESSAGE,
            CategoryRecord.objects.withdrawn().filter(application_id=application_id),
            person=applicant,
            application=application,
            category=Category.WITHDRAWN,
            first_name=application.first_name or applicant.first_name,
            last_name=application.last_name or applicant.last_name,
            email=application.email or applicant.email,
            gender=application.gender or applicant.gender,
            scholar_type=application.position,
            scholar_office=application.office,
            category_changed_at=now,
            withdrawal_reason=reason,
            withdrawal_date=now,
            expires_at=withdrawal_expiry(now),
            added_by=actor,
            notes=notes or "",
        )
        application.mark_status(Application.Status.WITHDRAWN)

        log_audit_event(
            action_code=AuditLog.ActionCode.CATEGORY_WITHDRAWN,
            user=actor,
            target=f"application:{application.pk}",
            context={
                "record_id": record.pk,
                "reason": reason,
                "expires_at": record.expires_at,
            },
        )

    _log_transition(
        "Application %s withdrawn until %s",
        application.pk,
        record.expires_at.isoformat(),
        action="category.withdrawn",
        actor=actor,
        record_id=record.pk,
        application_id=application.pk,
    )
    return record


def blacklist(
    person_id: int,
    *,
    actor: User,
    reason: str,
    restriction_period: int = PERMANENT_RESTRICTION,
    notes: str = "",
    application_id: Optional[int] = None,
    scholar_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> CategoryRecord:
    """Blacklist a person, permanently or for ``restriction_period`` months."""

    if restriction_period is None:
        restriction_period = PERMANENT_RESTRICTION
    if restriction_period < 0:
        raise InvalidRequest("Restriction period cannot be negative")

    now = now or timezone.now()
    UserModel = get_user_model()

    with transaction.atomic():
        try:
            person = UserModel._default_manager.select_for_update().get(pk=person_id)
        except UserModel.DoesNotExist as exc:
            raise RecordNotFound("User not found") from exc

        existing = _active_blacklist_for(person, now)
        if existing is not None:
            raise CategoryConflict(ALREADY_BLACKLISTED_MESSAGE, record=existing)

        application = (
            Application.objects.filter(pk=application_id).first()
            if application_id
            else None
        )
        scholar = Scholar.objects.filter(pk=scholar_id).first() if scholar_id else None

        scholar_type = scholar_office = ""
        if application is not None:
            scholar_type, scholar_office = application.position, application.office
        if scholar is not None:
            scholar_type, scholar_office = scholar.scholar_type, scholar.office

        record = _insert_active_record(
            ALREADY_BLACKLISTED_MESSAGE,
            CategoryRecord.objects.blacklisted().filter(person_id=person_id),
            person=person,
            application=application,
            scholar=scholar,
            category=Category.BLACKLISTED,
            first_name=person.first_name,
            last_name=person.last_name,
            email=person.email,
            gender=person.gender,
            scholar_type=scholar_type,
            scholar_office=scholar_office,
            category_changed_at=now,
            blacklist_reason=reason,
            blacklist_date=now,
            restriction_period=restriction_period,
            blacklist_expires_at=blacklist_expiry(now, restriction_period),
            added_by=actor,
            notes=notes or "",
        )
        if application is not None:
            application.mark_status(Application.Status.REJECTED)
        if scholar is not None:
            scholar.mark_status(Scholar.Status.INACTIVE)

        log_audit_event(
            action_code=AuditLog.ActionCode.CATEGORY_BLACKLISTED,
            user=actor,
            target=f"user:{person.pk}",
            context={
                "record_id": record.pk,
                "reason": reason,
                "restriction_period": restriction_period,
                "expires_at": record.blacklist_expires_at,
            },
        )

    _log_transition(
        "Person %s blacklisted (restriction %s months)",
        person.pk,
        restriction_period,
        action="category.blacklisted",
        actor=actor,
        record_id=record.pk,
        person_id=person.pk,
        permanent=restriction_period == PERMANENT_RESTRICTION,
    )
    return record


def remove_from_blacklist(
    record_id: int,
    *,
    reason: str = "",
    actor: Optional[User] = None,
) -> CategoryRecord:
    """Delete a blacklist entry ahead of its expiry.

    Returns the removed record (no longer persisted) so callers can report
    who was cleared.
    """

    with transaction.atomic():
        try:
            record = CategoryRecord.objects.select_for_update().get(pk=record_id)
        except CategoryRecord.DoesNotExist as exc:
            raise RecordNotFound("Blacklist record not found") from exc

        if record.is_protected:
            raise ProtectedRecordError(PROTECTED_DELETE_MESSAGE)
        if record.category != Category.BLACKLISTED:
            raise InvalidCategoryState("Record is not a blacklist entry")

        _delete_if_exists(CategoryRecord.objects.filter(pk=record.pk))

        log_audit_event(
            action_code=AuditLog.ActionCode.BLACKLIST_REMOVED,
            user=actor,
            target=f"user:{record.person_id}",
            context={"record_id": record.pk, "reason": reason},
        )

    _log_transition(
        "Blacklist record %s for person %s removed",
        record.pk,
        record.person_id,
        action="category.blacklist_removed",
        actor=actor,
        record_id=record.pk,
        person_id=record.person_id,
        reason=reason,
    )
    return record


def _discard_stale_entry(record: CategoryRecord) -> None:
    try:
        with transaction.atomic():
            _delete_if_exists(CategoryRecord.objects.filter(pk=record.pk))
    except DatabaseError:
        logger.warning(
            "Could not remove expired blacklist record %s",
            record.pk,
            exc_info=True,
            extra={"context": {"action": "category.gate_purge_failed", "record_id": record.pk}},
        )
    else:
        logger.info(
            "Removed expired blacklist record %s during lookup",
            record.pk,
            extra={"context": {"action": "category.gate_purged", "record_id": record.pk}},
        )


def is_blacklisted(
    *,
    person_id: Optional[int] = None,
    email: Optional[str] = None,
    now: Optional[datetime] = None,
) -> GateResult:
    """Answer whether a person (by id) or an email is currently blacklisted.

    Exactly one of ``person_id`` or ``email`` must be supplied. Expired
    entries never count as blacklisted, whether or not the sweep has removed
    them yet; any found along the way are deleted on a best-effort basis.
    """

    has_person = person_id not in (None, "")
    normalised_email = (email or "").strip().lower()
    if has_person == bool(normalised_email):
        raise InvalidRequest("Provide exactly one of person_id or email")

    now = now or timezone.now()
    matches = CategoryRecord.objects.blacklisted()
    if has_person:
        matches = matches.filter(person_id=person_id)
    else:
        matches = matches.filter(email=normalised_email)

    active: Optional[CategoryRecord] = None
    for record in matches.order_by("-blacklist_date", "-id"):
        if is_expired(record, now):
            _discard_stale_entry(record)
        elif active is None:
            active = record

    if active is None:
        return GateResult(blacklisted=False)

    return GateResult(
        blacklisted=True,
        reason=active.blacklist_reason,
        is_permanent=is_permanent(active),
        expires_at=active.blacklist_expires_at,
    )


_CLEANUP_PHASES = (
    ("withdrawn", expired_withdrawn_q),
    ("blacklist", expired_blacklist_q),
)


def cleanup(now: Optional[datetime] = None) -> CleanupResult:
    """Delete every expired withdrawn and time-limited blacklist record.

    The phases run independently; a failing phase is logged and reported in
    ``failed_phases`` while the other phase still completes. Running the
    sweep again with the same ``now`` removes nothing.
    """

    now = now or timezone.now()
    result = CleanupResult()

    for phase, predicate in _CLEANUP_PHASES:
        try:
            with transaction.atomic():
                removed = _delete_if_exists(CategoryRecord.objects.filter(predicate(now)))
        except DatabaseError:
            logger.exception(
                "Category cleanup phase %s failed",
                phase,
                extra={"context": {"action": "category.cleanup_failed", "phase": phase}},
            )
            result.failed_phases.append(phase)
            continue
        setattr(result, f"{phase}_removed", removed)

    logger.info(
        "Category cleanup removed %s withdrawn and %s blacklist records",
        result.withdrawn_removed,
        result.blacklist_removed,
        extra={"context": {"action": "category.cleanup", **result.as_dict()}},
    )
    return result


__all__ = [
    "CleanupResult",
    "GateResult",
    "blacklist",
    "cleanup",
    "graduate",
    "is_blacklisted",
    "remove_from_blacklist",
    "withdraw",
]
