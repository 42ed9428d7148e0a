"""Serializers for the category record API."""

from __future__ import annotations

from rest_framework import serializers

from apps.scholars.models import Application, Scholar

from .models import CategoryRecord


class CategoryRecordSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    added_by_name = serializers.SerializerMethodField()

    class Meta:
        model = CategoryRecord
        fields = (
            "id",
            "person",
            "application",
            "scholar",
            "category",
            "full_name",
            "first_name",
            "last_name",
            "email",
            "gender",
            "scholar_type",
            "scholar_office",
            "total_service_months",
            "completed_hours",
            "start_date",
            "end_date",
            "category_changed_at",
            "graduation_date",
            "academic_year",
            "withdrawal_reason",
            "withdrawal_date",
            "expires_at",
            "blacklist_reason",
            "blacklist_date",
            "restriction_period",
            "blacklist_expires_at",
            "added_by",
            "added_by_name",
            "notes",
            "is_protected",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    def get_added_by_name(self, obj: CategoryRecord):
        actor = obj.added_by
        if actor is None:
            return None
        return actor.get_full_name() or actor.get_username()


class GraduateSerializer(serializers.Serializer):
    graduation_date = serializers.DateTimeField(required=False, allow_null=True)
    academic_year = serializers.CharField(required=False, allow_blank=True, max_length=16)
    total_service_months = serializers.IntegerField(required=False, min_value=0, allow_null=True)
    completed_hours = serializers.FloatField(required=False, min_value=0, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class WithdrawSerializer(serializers.Serializer):
    reason = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BlacklistSerializer(serializers.Serializer):
    reason = serializers.CharField()
    restriction_period = serializers.IntegerField(required=False, min_value=0, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    application_id = serializers.IntegerField(required=False, allow_null=True)
    scholar_id = serializers.IntegerField(required=False, allow_null=True)


class RemoveBlacklistSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class BlacklistCheckSerializer(serializers.Serializer):
    person_id = serializers.IntegerField(required=False, min_value=1)
    email = serializers.CharField(required=False, allow_blank=True)


class GateResultSerializer(serializers.Serializer):
    blacklisted = serializers.BooleanField()
    reason = serializers.CharField(allow_null=True)
    is_permanent = serializers.BooleanField(allow_null=True)
    expires_at = serializers.DateTimeField(allow_null=True)


class CleanupResultSerializer(serializers.Serializer):
    withdrawn_removed = serializers.IntegerField(min_value=0)
    blacklist_removed = serializers.IntegerField(min_value=0)
    failed_phases = serializers.ListField(child=serializers.CharField())


class PaginationSerializer(serializers.Serializer):
    total = serializers.IntegerField(min_value=0)
    page = serializers.IntegerField(min_value=1)
    limit = serializers.IntegerField(min_value=1)
    total_pages = serializers.IntegerField(min_value=0)


class ActiveScholarSerializer(serializers.ModelSerializer):
    first_name = serializers.CharField(source="user.first_name", read_only=True, default="")
    last_name = serializers.CharField(source="user.last_name", read_only=True, default="")
    email = serializers.EmailField(source="user.email", read_only=True, default="")

    class Meta:
        model = Scholar
        fields = (
            "id",
            "user",
            "application",
            "first_name",
            "last_name",
            "email",
            "scholar_type",
            "office",
            "deployed_at",
            "semester_start_date",
            "semester_end_date",
            "semester_months",
            "status",
        )
        read_only_fields = fields


class TraineeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Application
        fields = (
            "id",
            "applicant",
            "first_name",
            "last_name",
            "email",
            "gender",
            "position",
            "office",
            "status",
            "submitted_at",
            "updated_at",
        )
        read_only_fields = fields
