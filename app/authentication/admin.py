"""
Django admin configuration for authentication models.

Related files:
    - models.py: Model definitions
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from authentication.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin configuration for directory users.

    Profile fields are owned by the identity provider and refreshed on
    every sign-in, so edits here are overwritten by the next token.
    """

    list_display = (
        "name",
        "email",
        "external_id",
        "is_online",
        "is_active",
        "is_staff",
        "date_joined",
    )
    list_filter = (
        "is_online",
        "is_active",
        "is_staff",
        "is_superuser",
    )
    search_fields = ("name", "email", "external_id")
    ordering = ("name",)

    fieldsets = (
        (None, {"fields": ("external_id", "password")}),
        ("Profile", {"fields": ("name", "email", "avatar_ref", "is_online")}),
        (
            "Status",
            {"fields": ("is_active", "is_staff", "is_superuser")},
        ),
        (
            "Permissions",
            {"fields": ("groups", "user_permissions")},
        ),
        (
            "Important dates",
            {"fields": ("date_joined", "last_login")},
        ),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("external_id", "name", "email", "password1", "password2"),
            },
        ),
    )

    readonly_fields = ("date_joined", "last_login")
