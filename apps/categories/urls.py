"""URL configuration for the category record API."""

from __future__ import annotations

from django.urls import path

from .views import (
    AcademicYearsView,
    ActiveScholarListView,
    BlacklistCheckView,
    BlacklistEntryView,
    BlacklistPersonView,
    CategoryCleanupView,
    CategoryRecordListView,
    CategoryReportView,
    CategoryStatsView,
    GraduateScholarView,
    TraineeListView,
    WithdrawApplicationView,
)

app_name = "categories"

urlpatterns = [
    path("", CategoryRecordListView.as_view(), name="list"),
    path("stats/", CategoryStatsView.as_view(), name="stats"),
    path("report/", CategoryReportView.as_view(), name="report"),
    path("academic-years/", AcademicYearsView.as_view(), name="academic-years"),
    path("scholars/", ActiveScholarListView.as_view(), name="scholars"),
    path("trainees/", TraineeListView.as_view(), name="trainees"),
    path("check-blacklist/", BlacklistCheckView.as_view(), name="check-blacklist"),
    path("graduate/<int:scholar_id>/", GraduateScholarView.as_view(), name="graduate"),
    path("withdraw/<int:application_id>/", WithdrawApplicationView.as_view(), name="withdraw"),
    path("blacklist/<int:person_id>/", BlacklistPersonView.as_view(), name="blacklist"),
    path(
        "blacklist/entries/<int:record_id>/",
        BlacklistEntryView.as_view(),
        name="blacklist-entry",
    ),
    path("cleanup/", CategoryCleanupView.as_view(), name="cleanup"),
]
