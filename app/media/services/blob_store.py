"""
BlobStoreService for attachment uploads and URL resolution.

Provides:
- Upload handles: opaque storage references issued before any bytes move
- Byte storage through Django's default_storage (local or S3 backends)
- Read-time URL resolution for storage references

Chat only ever stores the storage reference. URLs are resolved every time
a message, shared-media entry or avatar is rendered and never persisted,
so a storage backend switch or signed-URL expiry never leaves stale links.
"""

from __future__ import annotations

import mimetypes
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import magic
from django.conf import settings
from django.urls import reverse
from django.utils import timezone

from core.exceptions import ErrorCode
from core.services import BaseService, ServiceResult
from media.models import UploadHandle

if TYPE_CHECKING:
    from collections.abc import Iterable

    from django.core.files import File

    from authentication.models import User

# Bytes read for magic number detection
SNIFF_BYTES = 2048

GENERIC_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadTarget:
    """Where and until when a client may upload bytes for a storage ref."""

    storage_ref: str
    upload_url: str
    expires_at: datetime


class BlobStoreService(BaseService):
    """
    Service for attachment storage.

    Usage:
        # 1. Client asks for a handle
        target = BlobStoreService.request_upload_handle(user).data

        # 2. Client uploads bytes to target.upload_url
        BlobStoreService.store(user, target.storage_ref, uploaded_file)

        # 3. Message send validates the reference
        BlobStoreService.validate_attachment(user, target.storage_ref)

        # Rendering
        url = BlobStoreService.resolve_url(message.attachment_ref)
    """

    @classmethod
    def request_upload_handle(cls, caller: User) -> ServiceResult[UploadTarget]:
        """
        Issue a new pending upload handle owned by the caller.

        Returns:
            ServiceResult with an UploadTarget
        """
        ttl = timedelta(seconds=settings.UPLOAD_HANDLE_TTL_SECONDS)
        handle = UploadHandle.objects.create(
            owner=caller,
            expires_at=timezone.now() + ttl,
        )

        cls.get_logger().info(f"Issued upload handle {handle.storage_ref} to user {caller.id}")
        return ServiceResult.success(cls._target_for(handle))

    @classmethod
    def store(
        cls,
        caller: User,
        storage_ref: str,
        file: File,
    ) -> ServiceResult[UploadHandle]:
        """
        Store uploaded bytes for a pending handle.

        Args:
            caller: User uploading (must own the handle)
            storage_ref: Handle identifier
            file: Uploaded file object

        Returns:
            ServiceResult with the completed UploadHandle. Failures:
            NOT_FOUND for unknown or foreign handles, CONFLICT for expired or
            already completed handles, INVALID_ARGUMENT for empty or
            oversized files.

        The stored content_type is detected from the bytes, not taken from
        the client.
        """
        handle_id = cls._parse_ref(storage_ref)
        if handle_id is None:
            return ServiceResult.failure("Upload handle not found", error_code=ErrorCode.NOT_FOUND)

        size = getattr(file, "size", None) or 0
        if size <= 0:
            return ServiceResult.failure("Uploaded file is empty", error_code=ErrorCode.INVALID_ARGUMENT)
        if size > settings.UPLOAD_MAX_BYTES:
            return ServiceResult.failure(
                f"File exceeds the {settings.UPLOAD_MAX_BYTES} byte limit",
                error_code=ErrorCode.INVALID_ARGUMENT,
            )

        with cls.atomic():
            handle = (
                UploadHandle.objects.select_for_update()
                .filter(storage_ref=handle_id, owner=caller)
                .first()
            )
            if handle is None:
                return ServiceResult.failure("Upload handle not found", error_code=ErrorCode.NOT_FOUND)
            if handle.is_completed:
                return ServiceResult.failure(
                    "Upload handle has already been used",
                    error_code=ErrorCode.CONFLICT,
                )
            if handle.is_expired:
                return ServiceResult.failure("Upload handle has expired", error_code=ErrorCode.CONFLICT)

            filename = (getattr(file, "name", "") or "upload").rsplit("/", 1)[-1]
            content_type = cls.detect_content_type(file, filename)

            try:
                handle.file.save(filename, file, save=False)
            except OSError as e:
                return cls.handle_exception(e, f"Storing upload {handle.storage_ref}")
            handle.original_filename = filename
            handle.content_type = content_type
            handle.size = size
            handle.status = UploadHandle.Status.COMPLETED
            handle.completed_at = timezone.now()
            handle.save()

        cls.get_logger().info(
            f"Stored {size} bytes for upload handle {handle.storage_ref} (user {caller.id})"
        )
        return ServiceResult.success(handle)

    @classmethod
    def validate_attachment(cls, caller: User, storage_ref: str) -> ServiceResult[UploadHandle]:
        """
        Check that a storage ref is a completed upload owned by the caller.

        Returns:
            ServiceResult with the UploadHandle, or INVALID_ARGUMENT
        """
        handle_id = cls._parse_ref(storage_ref)
        handle = None
        if handle_id is not None:
            handle = UploadHandle.objects.filter(
                storage_ref=handle_id,
                owner=caller,
                status=UploadHandle.Status.COMPLETED,
            ).first()

        if handle is None:
            return ServiceResult.failure(
                "Attachment is not a completed upload",
                error_code=ErrorCode.INVALID_ARGUMENT,
            )
        return ServiceResult.success(handle)

    @classmethod
    def resolve_url(cls, storage_ref: str | None) -> str | None:
        """
        Resolve a storage reference to a retrievable URL.

        Absolute http(s) references (provider avatars) are returned as-is.
        Unknown, malformed and incomplete references resolve to None.
        """
        if not storage_ref:
            return None
        if cls._is_absolute_url(storage_ref):
            return storage_ref
        return cls.resolve_urls([storage_ref]).get(storage_ref)

    @classmethod
    def resolve_urls(cls, storage_refs: Iterable[str | None]) -> dict[str, str | None]:
        """
        Resolve many references with one query.

        Returns:
            Mapping of each non-empty input reference to its URL or None
        """
        resolved: dict[str, str | None] = {}
        lookup: dict[uuid.UUID, str] = {}
        for ref in storage_refs:
            if not ref or ref in resolved:
                continue
            if cls._is_absolute_url(ref):
                resolved[ref] = ref
                continue
            resolved[ref] = None
            handle_id = cls._parse_ref(ref)
            if handle_id is not None:
                lookup[handle_id] = ref

        if lookup:
            handles = UploadHandle.objects.filter(
                storage_ref__in=lookup.keys(),
                status=UploadHandle.Status.COMPLETED,
            )
            for handle in handles:
                if handle.file:
                    resolved[lookup[handle.storage_ref]] = handle.file.url

        return resolved

    @classmethod
    def detect_content_type(cls, file: File, filename: str) -> str:
        """
        Detect an upload's MIME type from its content.

        The type the client declared is ignored. Content libmagic cannot
        identify falls back to a guess from the filename extension.

        Args:
            file: Uploaded file; its position is reset to the start
            filename: Original filename, used only for the fallback

        Returns:
            MIME type string, application/octet-stream when nothing matches
        """
        sniffed = cls._sniff_content_type(file)
        if sniffed and sniffed != GENERIC_CONTENT_TYPE:
            return sniffed
        return mimetypes.guess_type(filename)[0] or GENERIC_CONTENT_TYPE

    # =========================================================================
    # Helpers
    # =========================================================================

    @classmethod
    def _sniff_content_type(cls, file: File) -> str | None:
        file.seek(0)
        header = file.read(SNIFF_BYTES)
        file.seek(0)

        if not header:
            return None

        try:
            return magic.Magic(mime=True).from_buffer(header)
        except magic.MagicException:
            cls.get_logger().warning("Could not detect upload content type", exc_info=True)
            return None

    @staticmethod
    def _parse_ref(storage_ref: str | uuid.UUID | None) -> uuid.UUID | None:
        if isinstance(storage_ref, uuid.UUID):
            return storage_ref
        try:
            return uuid.UUID(str(storage_ref))
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _is_absolute_url(value: str) -> bool:
        return value.startswith(("http://", "https://"))

    @staticmethod
    def _target_for(handle: UploadHandle) -> UploadTarget:
        return UploadTarget(
            storage_ref=str(handle.storage_ref),
            upload_url=reverse(
                "media:upload-bytes",
                kwargs={"storage_ref": handle.storage_ref},
            ),
            expires_at=handle.expires_at,
        )
