from django.contrib import admin

from .models import Application, Scholar


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ("applicant", "position", "office", "status", "submitted_at")
    list_filter = ("status", "position")
    search_fields = ("first_name", "last_name", "email", "applicant__username")


@admin.register(Scholar)
class ScholarAdmin(admin.ModelAdmin):
    list_display = ("user", "scholar_type", "office", "status", "deployed_at")
    list_filter = ("status", "scholar_type", "office")
    search_fields = ("user__first_name", "user__last_name", "user__email", "office")
