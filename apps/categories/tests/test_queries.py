from datetime import datetime, timezone as dt_timezone

import pytest
from dateutil.relativedelta import relativedelta

from apps.categories import services
from apps.categories.exceptions import InvalidRequest
from apps.categories.queries import (
    CategoryFilters,
    academic_years,
    category_stats,
    list_active_scholars,
    list_by_category,
    list_trainees,
    report_data,
)
from apps.scholars.models import Application, Scholar, ScholarType

NOW = datetime(2024, 1, 15, 9, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def archive(person_factory, application_factory, scholar_factory, staff_user):
    assistant = scholar_factory(
        user=person_factory(first_name="Alice", last_name="Archer", gender="Female"),
        office="Registrar",
    )
    marshal = scholar_factory(
        user=person_factory(first_name="Bob", last_name="Baker", gender="Male"),
        scholar_type=ScholarType.STUDENT_MARSHAL,
        office="Library",
    )
    records = {
        "assistant": services.graduate(
            assistant.pk, actor=staff_user, academic_year="2023-2024", now=NOW
        ),
        "marshal": services.graduate(
            marshal.pk,
            actor=staff_user,
            academic_year="2024-2025",
            now=NOW + relativedelta(days=1),
        ),
        "withdrawn": services.withdraw(
            application_factory(
                applicant=person_factory(first_name="Carol", email="carol@example.com")
            ).pk,
            actor=staff_user,
            reason="Moved",
            now=NOW,
        ),
        "blacklisted": services.blacklist(
            person_factory(first_name="Dave").pk,
            actor=staff_user,
            reason="Misconduct",
            now=NOW,
        ),
        "expired": services.blacklist(
            person_factory(first_name="Eve").pk,
            actor=staff_user,
            reason="Late",
            restriction_period=1,
            now=NOW - relativedelta(months=2),
        ),
    }
    return records


@pytest.mark.django_db
def test_listing_hides_expired_records_by_default(archive):
    page = list_by_category(CategoryFilters(), now=NOW)

    assert page.total == 4
    assert archive["expired"] not in page.records

    page = list_by_category(CategoryFilters(include_expired=True), now=NOW)
    assert page.total == 5


@pytest.mark.django_db
def test_graduates_are_listed_newest_graduation_first(archive):
    page = list_by_category(CategoryFilters(category="graduated"), now=NOW)

    assert page.records == [archive["marshal"], archive["assistant"]]


@pytest.mark.django_db
def test_listing_filters(archive):
    by_office = list_by_category(CategoryFilters(office="Library"), now=NOW)
    by_type = list_by_category(
        CategoryFilters(scholar_type=ScholarType.STUDENT_MARSHAL), now=NOW
    )
    by_year = list_by_category(CategoryFilters(academic_year="2023-2024"), now=NOW)
    by_name = list_by_category(CategoryFilters(search="aLiCe"), now=NOW)
    by_email = list_by_category(CategoryFilters(search="CAROL@"), now=NOW)
    by_date = list_by_category(
        CategoryFilters(date_from=NOW + relativedelta(hours=1)), now=NOW
    )

    assert by_office.records == [archive["marshal"]]
    assert by_type.records == [archive["marshal"]]
    assert by_year.records == [archive["assistant"]]
    assert by_name.records == [archive["assistant"]]
    assert by_email.records == [archive["withdrawn"]]
    assert by_date.records == [archive["marshal"]]


@pytest.mark.django_db
def test_listing_pagination(archive):
    first = list_by_category(CategoryFilters(), page=1, limit=3, now=NOW)
    second = list_by_category(CategoryFilters(), page=2, limit=3, now=NOW)

    assert (first.total, first.limit, first.total_pages) == (4, 3, 2)
    assert len(first.records) == 3
    assert len(second.records) == 1
    assert not set(first.records) & set(second.records)


@pytest.mark.django_db
def test_listing_caps_limit_and_handles_empty_results():
    page = list_by_category(CategoryFilters(category="withdrawn"), limit=500, now=NOW)

    assert page.limit == 100
    assert (page.total, page.total_pages, page.records) == (0, 0, [])
    assert list_by_category(CategoryFilters(), limit=0, now=NOW).limit == 20


def test_filters_from_query_params():
    filters = CategoryFilters.from_params(
        {
            "category": "all",
            "office": " Registrar ",
            "search": "",
            "date_from": "2024-01-01",
            "date_to": "2024-01-31",
            "include_expired": "true",
        }
    )

    assert filters.category is None
    assert filters.office == "Registrar"
    assert filters.search is None
    assert filters.date_from == datetime(2024, 1, 1, tzinfo=dt_timezone.utc)
    assert filters.date_to.date() == datetime(2024, 1, 31).date()
    assert filters.date_to.hour == 23
    assert filters.include_expired is True


@pytest.mark.parametrize(
    "params",
    [{"category": "suspended"}, {"date_from": "last tuesday"}],
)
def test_filters_reject_invalid_params(params):
    with pytest.raises(InvalidRequest):
        CategoryFilters.from_params(params)


@pytest.mark.django_db
def test_category_stats(archive, scholar_factory, application_factory):
    scholar_factory()
    application_factory(status=Application.Status.TRAINEE)

    stats = category_stats(now=NOW, days=3)

    assert stats == {
        "active": 0,
        "graduated": 2,
        "withdrawn": 1,
        "blacklisted": 1,
        "withdrawn_expiring_soon": 0,
        "blacklist_expiring_soon": 0,
        "scholars": 1,
        "trainees": 1,
    }


@pytest.mark.django_db
def test_category_stats_counts_entries_expiring_soon(archive, person_factory, staff_user):
    services.blacklist(
        person_factory().pk,
        actor=staff_user,
        reason="Late",
        restriction_period=3,
        now=NOW,
    )
    almost_expired = archive["withdrawn"].expires_at - relativedelta(days=2)

    stats = category_stats(now=almost_expired, days=3)

    assert stats["withdrawn_expiring_soon"] == 1
    assert stats["blacklist_expiring_soon"] == 1
    assert category_stats(now=almost_expired, days=1)["withdrawn_expiring_soon"] == 0


@pytest.mark.django_db
def test_report_data_summarises_matching_records(archive):
    report = report_data(CategoryFilters(), now=NOW)

    assert len(report.records) == 4
    assert report.summary == {
        "total": 4,
        "by_category": {"graduated": 2, "withdrawn": 1, "blacklisted": 1},
        "by_gender": {"male": 1, "female": 3},
        "by_type": {"student_assistant": 2, "student_marshal": 1},
    }


@pytest.mark.django_db
def test_report_data_respects_filters(archive):
    report = report_data(CategoryFilters(category="graduated", office="Registrar"), now=NOW)

    assert report.records == [archive["assistant"]]
    assert report.summary["by_category"] == {"graduated": 1, "withdrawn": 0, "blacklisted": 0}


@pytest.mark.django_db
def test_academic_years_are_distinct_and_newest_first(archive, scholar_factory, staff_user):
    services.graduate(scholar_factory().pk, actor=staff_user, academic_year="2023-2024", now=NOW)

    assert academic_years() == ["2024-2025", "2023-2024"]


@pytest.fixture
def roster(person_factory, application_factory, scholar_factory):
    return {
        "registrar": scholar_factory(
            user=person_factory(first_name="Nina", last_name="North"),
            deployed_at=NOW - relativedelta(months=2),
        ),
        "library": scholar_factory(
            user=person_factory(first_name="Oscar", email="oscar@example.com"),
            scholar_type=ScholarType.STUDENT_MARSHAL,
            office="Library",
            deployed_at=NOW - relativedelta(months=1),
        ),
        "finished": scholar_factory(status=Scholar.Status.COMPLETED),
        "trainee": application_factory(
            first_name="Tara", status=Application.Status.TRAINEE
        ),
        "office_interview": application_factory(
            position=ScholarType.STUDENT_MARSHAL,
            office="Library",
            status=Application.Status.OFFICE_INTERVIEW_SCHEDULED,
        ),
        "pending": application_factory(status=Application.Status.PENDING),
    }


@pytest.mark.django_db
def test_active_scholars_listing(roster):
    page = list_active_scholars()

    assert page.records == [roster["library"], roster["registrar"]]
    assert (page.total, page.page, page.total_pages) == (2, 1, 1)
    assert list_active_scholars(office="Library").records == [roster["library"]]
    assert list_active_scholars(scholar_type=ScholarType.STUDENT_ASSISTANT).records == [
        roster["registrar"]
    ]
    assert list_active_scholars(search="nORth").records == [roster["registrar"]]
    assert list_active_scholars(search="OSCAR@").records == [roster["library"]]


@pytest.mark.django_db
def test_active_scholars_search_is_counted_before_paging(roster, scholar_factory, person_factory):
    for _ in range(3):
        scholar_factory(user=person_factory(first_name="Nina"))

    page = list_active_scholars(search="nina", page=2, limit=3)

    assert (page.total, page.total_pages, len(page.records)) == (4, 2, 1)


@pytest.mark.django_db
def test_scholar_roster_matches_dashboard_count(roster):
    assert list_active_scholars().total == category_stats(now=NOW)["scholars"] == 2


@pytest.mark.django_db
def test_trainees_listing(roster):
    page = list_trainees()

    assert set(page.records) == {roster["trainee"], roster["office_interview"]}
    assert page.total == category_stats(now=NOW)["trainees"] == 2
    assert list_trainees(office="Library").records == [roster["office_interview"]]
    assert list_trainees(position=ScholarType.STUDENT_ASSISTANT).records == [roster["trainee"]]
    assert list_trainees(search="tara").records == [roster["trainee"]]
    assert list_trainees(limit=1).total_pages == 2


@pytest.mark.django_db
@pytest.mark.parametrize(
    "listing, params",
    [
        ("scholars", {"scholar_type": "professor"}),
        ("trainees", {"position": "professor"}),
    ],
)
def test_roster_listings_reject_unknown_types(listing, params):
    lister = list_active_scholars if listing == "scholars" else list_trainees

    with pytest.raises(InvalidRequest):
        lister(**params)
