"""Admin registration for category records."""

from django.contrib import admin, messages

from .models import PROTECTED_RECORDS, CategoryRecord


@admin.register(CategoryRecord)
class CategoryRecordAdmin(admin.ModelAdmin):
    list_display = (
        "full_name",
        "email",
        "category",
        "scholar_office",
        "category_changed_at",
        "expires_at",
        "blacklist_expires_at",
        "is_protected",
    )
    list_filter = ("category", "scholar_type", "scholar_office", "is_protected")
    search_fields = ("first_name", "last_name", "email")
    date_hierarchy = "category_changed_at"

    # Records are only created and changed through the lifecycle services,
    # which keep snapshots frozen and audit every restriction change.
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_protected:
            return False
        return super().has_delete_permission(request, obj)

    def delete_queryset(self, request, queryset):
        protected = queryset.filter(PROTECTED_RECORDS).count()
        if protected:
            self.message_user(
                request,
                f"Skipped {protected} protected archived record(s).",
                level=messages.WARNING,
            )
        queryset.exclude(PROTECTED_RECORDS).delete()
