"""Django admin configuration for media app."""

from django.contrib import admin

from media.models import UploadHandle


@admin.register(UploadHandle)
class UploadHandleAdmin(admin.ModelAdmin):
    """Admin configuration for UploadHandle model."""

    list_display = [
        "storage_ref",
        "owner",
        "original_filename",
        "content_type",
        "size",
        "status",
        "expires_at",
        "created_at",
    ]
    list_filter = ["status", "content_type"]
    search_fields = ["original_filename", "owner__name", "owner__email"]
    readonly_fields = [
        "storage_ref",
        "size",
        "content_type",
        "created_at",
        "updated_at",
        "completed_at",
    ]
    raw_id_fields = ["owner"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
