from datetime import datetime, timezone as dt_timezone

import pytest
from dateutil.relativedelta import relativedelta
from django.db import DatabaseError

from apps.categories import services
from apps.categories.exceptions import InvalidRequest
from apps.categories.models import CategoryRecord
from apps.security.models import LogEntry

NOW = datetime(2024, 1, 15, 9, 0, tzinfo=dt_timezone.utc)


@pytest.mark.django_db
@pytest.mark.parametrize(
    "lookup",
    [
        {},
        {"email": "   "},
        {"person_id": 1, "email": "someone@example.com"},
    ],
)
def test_gate_requires_exactly_one_key(lookup):
    with pytest.raises(InvalidRequest):
        services.is_blacklisted(now=NOW, **lookup)


@pytest.mark.django_db
def test_gate_reports_permanent_entry(person_factory, staff_user):
    person = person_factory()
    services.blacklist(person.pk, actor=staff_user, reason="Misconduct", now=NOW)

    result = services.is_blacklisted(person_id=person.pk, now=NOW + relativedelta(years=10))

    assert result.blacklisted is True
    assert result.reason == "Misconduct"
    assert result.is_permanent is True
    assert result.expires_at is None


@pytest.mark.django_db
def test_gate_matches_email_case_insensitively(person_factory, staff_user):
    person = person_factory(email="Jane.Doe@Example.com")
    services.blacklist(
        person.pk, actor=staff_user, reason="Late", restriction_period=6, now=NOW
    )

    result = services.is_blacklisted(email="  JANE.DOE@example.COM ", now=NOW)

    assert result.as_dict() == {
        "blacklisted": True,
        "reason": "Late",
        "is_permanent": False,
        "expires_at": datetime(2024, 7, 15, 9, 0, tzinfo=dt_timezone.utc),
    }


@pytest.mark.django_db
def test_gate_for_unknown_person_is_clear(person_factory):
    result = services.is_blacklisted(person_id=person_factory().pk, now=NOW)

    assert result.as_dict() == {
        "blacklisted": False,
        "reason": None,
        "is_permanent": None,
        "expires_at": None,
    }


@pytest.mark.django_db
def test_gate_treats_expired_entry_as_clear_and_removes_it(person_factory, staff_user):
    person = person_factory()
    record = services.blacklist(
        person.pk, actor=staff_user, reason="Late", restriction_period=12, now=NOW
    )

    assert services.is_blacklisted(person_id=person.pk, now=datetime(2025, 1, 1, tzinfo=dt_timezone.utc)).blacklisted

    result = services.is_blacklisted(
        person_id=person.pk, now=datetime(2025, 2, 1, tzinfo=dt_timezone.utc)
    )

    assert result.blacklisted is False
    assert not CategoryRecord.objects.filter(pk=record.pk).exists()


@pytest.mark.django_db
def test_gate_expires_exactly_at_expiry_instant(person_factory, staff_user):
    person = person_factory()
    record = services.blacklist(
        person.pk, actor=staff_user, reason="Late", restriction_period=1, now=NOW
    )

    result = services.is_blacklisted(person_id=person.pk, now=record.blacklist_expires_at)

    assert result.blacklisted is False


@pytest.mark.django_db
def test_gate_answers_even_when_stale_entry_cannot_be_removed(mocker, person_factory, staff_user):
    person = person_factory()
    record = services.blacklist(
        person.pk, actor=staff_user, reason="Late", restriction_period=1, now=NOW
    )
    mocker.patch(
        "apps.categories.services._delete_if_exists",
        side_effect=DatabaseError("database is locked"),
    )

    result = services.is_blacklisted(person_id=person.pk, now=NOW + relativedelta(months=2))

    assert result.blacklisted is False
    assert CategoryRecord.objects.filter(pk=record.pk).exists()
    entry = LogEntry.objects.get(level="WARNING", logger_name="apps.categories.services")
    assert entry.context["action"] == "category.gate_purge_failed"
    assert entry.context["record_id"] == record.pk
    assert "database is locked" in entry.context["exception"]


@pytest.mark.django_db
def test_gate_prefers_active_entry_when_email_is_shared(person_factory, staff_user):
    first = person_factory(email="shared@example.com")
    second = person_factory(email="Shared@example.com")
    stale = services.blacklist(
        first.pk,
        actor=staff_user,
        reason="Old issue",
        restriction_period=1,
        now=NOW - relativedelta(years=1),
    )
    services.blacklist(second.pk, actor=staff_user, reason="Current issue", now=NOW)

    result = services.is_blacklisted(email="shared@example.com", now=NOW)

    assert result.blacklisted is True
    assert result.reason == "Current issue"
    assert not CategoryRecord.objects.filter(pk=stale.pk).exists()
