import itertools
import os

import pytest


os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.test")

import django  # noqa: E402

django.setup()


from django.contrib.auth import get_user_model  # noqa: E402

from apps.scholars.models import Application, Scholar, ScholarType  # noqa: E402


User = get_user_model()


@pytest.fixture
def person_factory(db):
    sequence = itertools.count(1)

    def create_person(**overrides):
        number = next(sequence)
        fields = {
            "username": f"person{number}",
            "email": f"person{number}@example.com",
            "first_name": "Person",
            "last_name": f"Number{number}",
            "gender": "Female",
        }
        fields.update(overrides)
        return User.objects.create_user(password="password123", **fields)

    return create_person


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(
        username="officer",
        email="officer@example.com",
        password="password123",
        first_name="Olive",
        last_name="Officer",
        is_staff=True,
    )


@pytest.fixture
def application_factory(person_factory):
    def create_application(applicant=None, **overrides):
        applicant = applicant or person_factory()
        fields = {
            "first_name": applicant.first_name,
            "last_name": applicant.last_name,
            "email": applicant.email,
            "gender": applicant.gender,
            "position": ScholarType.STUDENT_ASSISTANT,
            "office": "Registrar",
            "status": Application.Status.TRAINEE,
        }
        fields.update(overrides)
        return Application.objects.create(applicant=applicant, **fields)

    return create_application


@pytest.fixture
def scholar_factory(application_factory):
    def create_scholar(user=None, application=None, **overrides):
        application = application or application_factory(
            applicant=user,
            status=Application.Status.ACCEPTED,
        )
        fields = {
            "user": user or application.applicant,
            "application": application,
            "scholar_type": application.position,
            "office": application.office,
            "semester_months": 5,
        }
        fields.update(overrides)
        return Scholar.objects.create(**fields)

    return create_scholar
