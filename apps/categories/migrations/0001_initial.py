"""Initial schema for category records."""

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("scholars", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CategoryRecord",
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
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("graduated", "Graduated"),
                            ("withdrawn", "Withdrawn"),
                            ("blacklisted", "Blacklisted"),
                        ],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                ("first_name", models.CharField(blank=True, max_length=150)),
                ("last_name", models.CharField(blank=True, max_length=150)),
                ("email", models.EmailField(db_index=True, max_length=254)),
                (
                    "gender",
                    models.CharField(
                        blank=True,
                        choices=[("Male", "Male"), ("Female", "Female"), ("Other", "Other")],
                        max_length=10,
                    ),
                ),
                (
                    "scholar_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("student_assistant", "Student assistant"),
                            ("student_marshal", "Student marshal"),
                        ],
                        max_length=32,
                    ),
                ),
                ("scholar_office", models.CharField(blank=True, db_index=True, max_length=255)),
                ("total_service_months", models.PositiveIntegerField(default=0)),
                ("completed_hours", models.FloatField(default=0)),
                ("start_date", models.DateTimeField(blank=True, null=True)),
                ("end_date", models.DateTimeField(blank=True, null=True)),
                (
                    "category_changed_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                ("graduation_date", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("academic_year", models.CharField(blank=True, max_length=16)),
                ("withdrawal_reason", models.TextField(blank=True)),
                ("withdrawal_date", models.DateTimeField(blank=True, null=True)),
                ("expires_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("blacklist_reason", models.TextField(blank=True)),
                ("blacklist_date", models.DateTimeField(blank=True, null=True)),
                (
                    "restriction_period",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Restriction length in months. 0 means permanent.",
                    ),
                ),
                (
                    "blacklist_expires_at",
                    models.DateTimeField(blank=True, db_index=True, null=True),
                ),
                ("notes", models.TextField(blank=True)),
                ("is_protected", models.BooleanField(default=False, editable=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "added_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="category_records_added",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "application",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="category_records",
                        to="scholars.application",
                    ),
                ),
                (
                    "person",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="category_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "scholar",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="category_records",
                        to="scholars.scholar",
                    ),
                ),
            ],
            options={
                "ordering": ("-category_changed_at", "-id"),
            },
        ),
        migrations.AddConstraint(
            model_name="categoryrecord",
            constraint=models.UniqueConstraint(
                condition=models.Q(("category", "blacklisted")),
                fields=("person",),
                name="categories_single_blacklist_per_person",
            ),
        ),
        migrations.AddConstraint(
            model_name="categoryrecord",
            constraint=models.UniqueConstraint(
                condition=models.Q(("category", "withdrawn")),
                fields=("application",),
                name="categories_single_withdrawal_per_application",
            ),
        ),
    ]
