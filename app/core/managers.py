"""
Custom QuerySet classes for soft-deletable models.

Manager vs QuerySet:
    - QuerySet: Defines chainable methods (filter, exclude, etc.)
    - Manager: Attaches QuerySet to model via SoftDeleteQuerySet.as_manager()

Usage:
    from core.managers import SoftDeleteQuerySet

    class Message(SoftDeleteMixin, BaseModel):
        objects = SoftDeleteQuerySet.as_manager()

    Message.objects.active()    # Only rows with is_deleted=False
    Message.objects.deleted()   # Only soft-deleted rows
    Message.objects.all()       # Everything

Note:
    Unlike a filtering manager, the default queryset here includes deleted
    rows. Deleted messages still count for ordering and unread math, and a
    deleted group must still be found so sends into it can be rejected.

Related:
    - core.model_mixins.SoftDeleteMixin: Model mixin for soft delete fields
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone


class SoftDeleteQuerySet(models.QuerySet):
    """
    QuerySet that provides soft delete operations.

    Methods:
        soft_delete(): Marks matching rows is_deleted=True
        deleted(): Filter to only deleted records
        active(): Filter to only active records
    """

    def soft_delete(self) -> int:
        """
        Soft delete all active objects in queryset.

        Returns:
            Number of rows newly marked as deleted
        """
        return self.filter(is_deleted=False).update(
            is_deleted=True,
            deleted_at=timezone.now(),
            updated_at=timezone.now(),
        )

    def deleted(self) -> SoftDeleteQuerySet:
        """
        Filter to only soft-deleted records.

        Returns:
            QuerySet containing only deleted records
        """
        return self.filter(is_deleted=True)

    def active(self) -> SoftDeleteQuerySet:
        """
        Filter to only active (non-deleted) records.

        Returns:
            QuerySet containing only active records

        Example:
            Message.objects.filter(conversation=conversation).active()
        """
        return self.filter(is_deleted=False)
