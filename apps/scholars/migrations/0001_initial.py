"""Initial schema for applications and scholars."""

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


SCHOLAR_TYPE_CHOICES = [
    ("student_assistant", "Student assistant"),
    ("student_marshal", "Student marshal"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Application",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("first_name", models.CharField(blank=True, max_length=150)),
                ("last_name", models.CharField(blank=True, max_length=150)),
                ("email", models.EmailField(blank=True, max_length=254)),
                (
                    "gender",
                    models.CharField(
                        blank=True,
                        choices=[("Male", "Male"), ("Female", "Female"), ("Other", "Other")],
                        max_length=10,
                    ),
                ),
                ("position", models.CharField(choices=SCHOLAR_TYPE_CHOICES, max_length=32)),
                ("office", models.CharField(blank=True, max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("under_review", "Under review"),
                            ("interview_scheduled", "Interview scheduled"),
                            ("passed_interview", "Passed interview"),
                            ("failed_interview", "Failed interview"),
                            ("trainee", "Trainee"),
                            ("training_completed", "Training completed"),
                            ("pending_office_interview", "Pending office interview"),
                            ("office_interview_scheduled", "Office interview scheduled"),
                            ("hours_completed", "Hours completed"),
                            ("accepted", "Accepted"),
                            ("rejected", "Rejected"),
                            ("withdrawn", "Withdrawn"),
                            ("on_hold", "On hold"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=32,
                    ),
                ),
                ("submitted_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "applicant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="scholar_applications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ("-submitted_at", "-id"),
            },
        ),
        migrations.CreateModel(
            name="Scholar",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("scholar_type", models.CharField(choices=SCHOLAR_TYPE_CHOICES, max_length=32)),
                ("office", models.CharField(db_index=True, max_length=255)),
                ("deployed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("semester_start_date", models.DateTimeField(blank=True, null=True)),
                ("semester_end_date", models.DateTimeField(blank=True, null=True)),
                ("semester_months", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("inactive", "Inactive"),
                            ("completed", "Completed"),
                        ],
                        db_index=True,
                        default="active",
                        max_length=16,
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "application",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="scholars",
                        to="scholars.application",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="scholar_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ("-deployed_at", "-id"),
            },
        ),
    ]
