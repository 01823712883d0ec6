"""
Create the upload handle table.
"""

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import media.models.upload_handle


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="UploadHandle",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "storage_ref",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                        help_text="Opaque storage reference for this upload",
                    ),
                ),
                (
                    "file",
                    models.FileField(
                        blank=True,
                        max_length=500,
                        upload_to=media.models.upload_handle.upload_handle_path,
                        help_text="Stored file (empty until uploaded)",
                    ),
                ),
                (
                    "original_filename",
                    models.CharField(
                        blank=True,
                        default="",
                        max_length=255,
                        help_text="Filename provided by the client",
                    ),
                ),
                (
                    "content_type",
                    models.CharField(
                        blank=True,
                        default="",
                        max_length=100,
                        help_text="MIME type detected from the uploaded bytes",
                    ),
                ),
                (
                    "size",
                    models.BigIntegerField(default=0, help_text="Stored file size in bytes"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed")],
                        default="pending",
                        max_length=20,
                        help_text="Current upload status",
                    ),
                ),
                (
                    "expires_at",
                    models.DateTimeField(help_text="When the byte upload window closes"),
                ),
                (
                    "completed_at",
                    models.DateTimeField(
                        blank=True, null=True, help_text="When the bytes were stored"
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="upload_handles",
                        to=settings.AUTH_USER_MODEL,
                        help_text="User who requested the handle",
                    ),
                ),
            ],
            options={
                "db_table": "media_upload_handle",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["owner", "status"],
                        name="idx_upload_handle_owner_status",
                    ),
                    models.Index(
                        fields=["expires_at"],
                        name="idx_upload_handle_expires",
                    ),
                ],
            },
        ),
    ]
