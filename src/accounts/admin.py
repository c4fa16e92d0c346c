"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from unfold.admin import ModelAdmin

from accounts.models import BoxofficeUser


@admin.register(BoxofficeUser)
class BoxofficeUserAdmin(UserAdmin, ModelAdmin):  # type: ignore[type-arg,misc]
    """Admin for BoxofficeUser, including role management."""

    list_display = ["username", "first_name", "last_name", "phone_number", "role", "is_active", "date_joined"]
    list_filter = ["role", "is_staff", "is_superuser", "is_active", "date_joined"]
    search_fields = ["username", "first_name", "last_name", "email", "phone_number"]
    ordering = ["-date_joined"]
    readonly_fields = ["id", "date_joined", "last_login"]

    fieldsets = (
        (
            "Personal Information",
            {"fields": ("id", ("username", "email"), ("first_name", "last_name"), "phone_number", "language")},
        ),
        ("Role", {"fields": ("role",)}),
        ("Authentication", {"fields": ("password", ("date_joined", "last_login"))}),
        ("Permissions", {"classes": ["collapse"], "fields": ("is_active", "is_staff", "is_superuser")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("username", "phone_number", "role", "password1", "password2"),
            },
        ),
    )
