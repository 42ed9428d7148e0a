import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from apps.categories import services
from apps.categories.models import CategoryRecord
from apps.security.models import AuditLog


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def staff_client(api_client, staff_user) -> APIClient:
    api_client.force_authenticate(user=staff_user)
    return api_client


@pytest.mark.django_db
def test_category_endpoints_require_staff(api_client, person_factory):
    url = reverse("categories:list")

    assert api_client.get(url).status_code in {
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
    }

    api_client.force_authenticate(user=person_factory())
    assert api_client.get(url).status_code == status.HTTP_403_FORBIDDEN
    assert api_client.post(reverse("categories:cleanup")).status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_blacklist_endpoint_and_conflict(staff_client, person_factory):
    person = person_factory()
    url = reverse("categories:blacklist", args=[person.pk])

    response = staff_client.post(url, {"reason": "Misconduct"}, format="json")

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["message"] == "User blacklisted permanently"
    record_id = response.json()["record"]["id"]

    response = staff_client.post(
        url, {"reason": "Again", "restriction_period": 6}, format="json"
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    body = response.json()
    assert body["code"] == "conflict"
    assert body["existing_record"]["id"] == record_id


@pytest.mark.django_db
def test_time_limited_blacklist_message(staff_client, person_factory):
    person = person_factory()

    response = staff_client.post(
        reverse("categories:blacklist", args=[person.pk]),
        {"reason": "Late", "restriction_period": 6},
        format="json",
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["message"] == "User blacklisted for 6 months"
    assert response.json()["record"]["blacklist_expires_at"] is not None


@pytest.mark.django_db
def test_blacklist_endpoint_validates_payload(staff_client, person_factory):
    url = reverse("categories:blacklist", args=[person_factory().pk])

    response = staff_client.post(url, {"restriction_period": -2}, format="json")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert set(response.json()) == {"reason", "restriction_period"}


@pytest.mark.django_db
def test_blacklist_check_for_any_authenticated_user(api_client, person_factory, staff_user):
    person = person_factory(email="flagged@example.com")
    services.blacklist(person.pk, actor=staff_user, reason="Misconduct")
    api_client.force_authenticate(user=person_factory())
    url = reverse("categories:check-blacklist")

    response = api_client.get(url, {"email": "FLAGGED@example.com"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "blacklisted": True,
        "reason": "Misconduct",
        "is_permanent": True,
        "expires_at": None,
    }
    assert api_client.get(url, {"person_id": person.pk}).json()["blacklisted"] is True

    missing = api_client.get(url)
    assert missing.status_code == status.HTTP_400_BAD_REQUEST
    assert missing.json()["code"] == "bad_request"


@pytest.mark.django_db
def test_graduate_endpoint_and_protected_removal(staff_client, scholar_factory):
    scholar = scholar_factory()

    response = staff_client.post(
        reverse("categories:graduate", args=[scholar.pk]),
        {"academic_year": "2024-2025", "completed_hours": 80},
        format="json",
    )

    assert response.status_code == status.HTTP_201_CREATED
    record = response.json()["record"]
    assert record["is_protected"] is True
    assert record["academic_year"] == "2024-2025"

    response = staff_client.delete(
        reverse("categories:blacklist-entry", args=[record["id"]])
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert CategoryRecord.objects.filter(pk=record["id"]).exists()


@pytest.mark.django_db
def test_withdraw_endpoint(staff_client, application_factory):
    application = application_factory()
    url = reverse("categories:withdraw", args=[application.pk])

    response = staff_client.post(url, {"reason": "Relocated"}, format="json")
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["record"]["expires_at"] is not None

    again = staff_client.post(url, {"reason": "Relocated"}, format="json")
    assert again.status_code == status.HTTP_409_CONFLICT

    missing = staff_client.post(
        reverse("categories:withdraw", args=[987654]), {"reason": "Relocated"}, format="json"
    )
    assert missing.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
def test_remove_blacklist_entry_endpoint(staff_client, person_factory, staff_user):
    record = services.blacklist(person_factory().pk, actor=staff_user, reason="Misconduct")

    response = staff_client.delete(
        reverse("categories:blacklist-entry", args=[record.pk]),
        {"reason": "Appeal granted"},
        format="json",
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "User removed from blacklist"
    assert not CategoryRecord.objects.filter(pk=record.pk).exists()


@pytest.mark.django_db
def test_listing_stats_report_and_years(staff_client, scholar_factory, person_factory, staff_user):
    services.graduate(scholar_factory().pk, actor=staff_user, academic_year="2024-2025")
    services.blacklist(person_factory().pk, actor=staff_user, reason="Misconduct")

    listing = staff_client.get(reverse("categories:list"), {"category": "graduated", "limit": 1})
    assert listing.status_code == status.HTTP_200_OK
    assert len(listing.json()["records"]) == 1
    assert listing.json()["pagination"] == {"total": 1, "page": 1, "limit": 1, "total_pages": 1}

    invalid = staff_client.get(reverse("categories:list"), {"category": "unknown"})
    assert invalid.status_code == status.HTTP_400_BAD_REQUEST

    stats = staff_client.get(reverse("categories:stats")).json()["stats"]
    assert stats["graduated"] == 1
    assert stats["blacklisted"] == 1

    report = staff_client.get(reverse("categories:report")).json()
    assert report["summary"]["total"] == 2
    assert len(report["records"]) == 2

    years = staff_client.get(reverse("categories:academic-years")).json()
    assert years == {"academic_years": ["2024-2025"]}


@pytest.mark.django_db
def test_cleanup_endpoint_records_audit_event(staff_client, staff_user):
    response = staff_client.post(reverse("categories:cleanup"))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["result"] == {
        "withdrawn_removed": 0,
        "blacklist_removed": 0,
        "failed_phases": [],
    }
    log = AuditLog.objects.get(action_code=AuditLog.ActionCode.CATEGORY_CLEANUP)
    assert log.user == staff_user
    assert log.endpoint == reverse("categories:cleanup")


@pytest.mark.django_db
def test_active_scholar_and_trainee_listings(staff_client, scholar_factory, person_factory, application_factory):
    scholar = scholar_factory(user=person_factory(first_name="Nina", email="nina@example.com"))
    trainee = application_factory(first_name="Tara")

    scholars = staff_client.get(reverse("categories:scholars"), {"search": "nina"})
    assert scholars.status_code == status.HTTP_200_OK
    body = scholars.json()
    assert [row["id"] for row in body["scholars"]] == [scholar.pk]
    assert body["scholars"][0]["email"] == "nina@example.com"
    assert body["pagination"] == {"total": 1, "page": 1, "limit": 20, "total_pages": 1}

    trainees = staff_client.get(reverse("categories:trainees"), {"limit": 5})
    assert trainees.status_code == status.HTTP_200_OK
    assert [row["id"] for row in trainees.json()["trainees"]] == [trainee.pk]
    assert trainees.json()["pagination"]["limit"] == 5

    invalid = staff_client.get(reverse("categories:trainees"), {"position": "professor"})
    assert invalid.status_code == status.HTTP_400_BAD_REQUEST
    assert invalid.json()["code"] == "bad_request"


@pytest.mark.django_db
def test_roster_listings_require_staff(api_client, person_factory):
    api_client.force_authenticate(user=person_factory())

    assert api_client.get(reverse("categories:scholars")).status_code == status.HTTP_403_FORBIDDEN
    assert api_client.get(reverse("categories:trainees")).status_code == status.HTTP_403_FORBIDDEN
