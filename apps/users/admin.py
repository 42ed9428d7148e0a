"""Admin registrations for the users app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class PortalUserAdmin(UserAdmin):
    list_display = ("username", "email", "first_name", "last_name", "gender", "is_staff")
    list_filter = UserAdmin.list_filter + ("gender",)
    fieldsets = UserAdmin.fieldsets + (("Profile", {"fields": ("gender",)}),)
