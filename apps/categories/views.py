"""DRF views exposing category transitions, the blacklist gate and reports."""

from __future__ import annotations

from typing import Optional

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.security.models import AuditLog
from apps.security.utils import log_audit_event

from . import queries, services
from .constants import PERMANENT_RESTRICTION
from .exceptions import (
    CategoryConflict,
    CategoryError,
    InvalidCategoryState,
    InvalidRequest,
    ProtectedRecordError,
    RecordNotFound,
)
from .serializers import (
    ActiveScholarSerializer,
    BlacklistCheckSerializer,
    BlacklistSerializer,
    CategoryRecordSerializer,
    CleanupResultSerializer,
    GateResultSerializer,
    GraduateSerializer,
    PaginationSerializer,
    RemoveBlacklistSerializer,
    TraineeSerializer,
    WithdrawSerializer,
)

ERROR_STATUS_CODES = (
    (RecordNotFound, status.HTTP_404_NOT_FOUND),
    (CategoryConflict, status.HTTP_409_CONFLICT),
    (ProtectedRecordError, status.HTTP_403_FORBIDDEN),
    (InvalidCategoryState, status.HTTP_400_BAD_REQUEST),
    (InvalidRequest, status.HTTP_400_BAD_REQUEST),
)


def _parse_int(value: Optional[str], default: Optional[int]) -> Optional[int]:
    try:
        if value is None:
            return default
        parsed = int(value)
        return parsed if parsed > 0 else default
    except (TypeError, ValueError):
        return default


def _error_response(exc: CategoryError) -> Response:
    status_code = status.HTTP_400_BAD_REQUEST
    for error_class, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            status_code = code
            break

    payload = {"message": str(exc), "code": exc.code}
    if isinstance(exc, CategoryConflict) and exc.record is not None:
        payload["existing_record"] = CategoryRecordSerializer(exc.record).data
    return Response(payload, status=status_code)


def _blacklist_message(restriction_period: int) -> str:
    if restriction_period == PERMANENT_RESTRICTION:
        return "User blacklisted permanently"
    return f"User blacklisted for {restriction_period} months"


def _page_payload(key: str, page: queries.CategoryPage, serializer_class) -> dict:
    pagination = PaginationSerializer(
        {
            "total": page.total,
            "page": page.page,
            "limit": page.limit,
            "total_pages": page.total_pages,
        }
    )
    return {
        key: serializer_class(page.records, many=True).data,
        "pagination": pagination.data,
    }


class StaffCategoryView(APIView):
    permission_classes = [permissions.IsAuthenticated, permissions.IsAdminUser]


class CategoryRecordListView(StaffCategoryView):
    def get(self, request):
        try:
            filters = queries.CategoryFilters.from_params(request.query_params)
        except InvalidRequest as exc:
            return _error_response(exc)

        page = queries.list_by_category(
            filters,
            page=_parse_int(request.query_params.get("page"), 1),
            limit=_parse_int(request.query_params.get("limit"), None),
        )
        return Response(_page_payload("records", page, CategoryRecordSerializer))


class ActiveScholarListView(StaffCategoryView):
    def get(self, request):
        params = request.query_params
        try:
            page = queries.list_active_scholars(
                office=params.get("office"),
                scholar_type=params.get("scholar_type"),
                search=params.get("search"),
                page=_parse_int(params.get("page"), 1),
                limit=_parse_int(params.get("limit"), None),
            )
        except InvalidRequest as exc:
            return _error_response(exc)
        return Response(_page_payload("scholars", page, ActiveScholarSerializer))


class TraineeListView(StaffCategoryView):
    def get(self, request):
        params = request.query_params
        try:
            page = queries.list_trainees(
                office=params.get("office"),
                position=params.get("position"),
                search=params.get("search"),
                page=_parse_int(params.get("page"), 1),
                limit=_parse_int(params.get("limit"), None),
            )
        except InvalidRequest as exc:
            return _error_response(exc)
        return Response(_page_payload("trainees", page, TraineeSerializer))


class CategoryStatsView(StaffCategoryView):
    def get(self, request):
        days = _parse_int(request.query_params.get("days"), None)
        return Response({"stats": queries.category_stats(days=days)})


class CategoryReportView(StaffCategoryView):
    def get(self, request):
        try:
            filters = queries.CategoryFilters.from_params(request.query_params)
        except InvalidRequest as exc:
            return _error_response(exc)

        report = queries.report_data(filters)
        return Response(
            {
                "records": CategoryRecordSerializer(report.records, many=True).data,
                "summary": report.summary,
            }
        )


class AcademicYearsView(StaffCategoryView):
    def get(self, request):
        return Response({"academic_years": queries.academic_years()})


class BlacklistCheckView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        serializer = BlacklistCheckSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        try:
            result = services.is_blacklisted(
                person_id=serializer.validated_data.get("person_id"),
                email=serializer.validated_data.get("email"),
            )
        except CategoryError as exc:
            return _error_response(exc)
        return Response(GateResultSerializer(result).data)


class GraduateScholarView(StaffCategoryView):
    def post(self, request, scholar_id: int):
        serializer = GraduateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            record = services.graduate(scholar_id, actor=request.user, **serializer.validated_data)
        except CategoryError as exc:
            return _error_response(exc)

        return Response(
            {
                "message": "Scholar graduated and archived successfully",
                "record": CategoryRecordSerializer(record).data,
            },
            status=status.HTTP_201_CREATED,
        )


class WithdrawApplicationView(StaffCategoryView):
    def post(self, request, application_id: int):
        serializer = WithdrawSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            record = services.withdraw(
                application_id, actor=request.user, **serializer.validated_data
            )
        except CategoryError as exc:
            return _error_response(exc)

        return Response(
            {
                "message": "Application withdrawn successfully",
                "record": CategoryRecordSerializer(record).data,
            },
            status=status.HTTP_201_CREATED,
        )


class BlacklistPersonView(StaffCategoryView):
    def post(self, request, person_id: int):
        serializer = BlacklistSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            record = services.blacklist(person_id, actor=request.user, **serializer.validated_data)
        except CategoryError as exc:
            return _error_response(exc)

        return Response(
            {
                "message": _blacklist_message(record.restriction_period),
                "record": CategoryRecordSerializer(record).data,
            },
            status=status.HTTP_201_CREATED,
        )


class BlacklistEntryView(StaffCategoryView):
    def delete(self, request, record_id: int):
        serializer = RemoveBlacklistSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            record = services.remove_from_blacklist(
                record_id,
                reason=serializer.validated_data["reason"],
                actor=request.user,
            )
        except CategoryError as exc:
            return _error_response(exc)

        return Response(
            {
                "message": "User removed from blacklist",
                "record": CategoryRecordSerializer(record).data,
            }
        )


class CategoryCleanupView(StaffCategoryView):
    def post(self, request):
        result = services.cleanup()
        log_audit_event(
            action_code=AuditLog.ActionCode.CATEGORY_CLEANUP,
            request=request,
            context=result.as_dict(),
        )
        return Response(
            {
                "message": (
                    f"Cleanup completed: {result.withdrawn_removed} withdrawn and "
                    f"{result.blacklist_removed} blacklist records removed"
                ),
                "result": CleanupResultSerializer(result).data,
            }
        )
