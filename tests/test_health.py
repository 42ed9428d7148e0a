from datetime import datetime, timezone as dt_timezone

import pytest
from django.urls import reverse

from apps.categories import services


@pytest.mark.django_db
def test_health_reports_expired_backlog(client, application_factory, staff_user):
    services.withdraw(
        application_factory().pk,
        actor=staff_user,
        reason="Moved",
        now=datetime(2020, 1, 1, tzinfo=dt_timezone.utc),
    )

    response = client.get(reverse("health"))

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok", "expired_backlog": 1}
