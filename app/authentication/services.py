"""
Authentication services.

This module provides the identity and directory services:
- IdentityService: Turns identity provider claims into a durable User
- UserDirectoryService: Profile lookups, the user list and presence

Related files:
    - models.py: User
    - backends.py: Calls IdentityService for every authenticated request

Usage:
    from authentication.services import IdentityService, UserDirectoryService

    result = IdentityService.upsert_from_provider("user_2abc", name="Ada")
    user = result.data

    UserDirectoryService.update_online_status(user, True)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction

from authentication.models import User
from core.exceptions import ErrorCode
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from django.db.models import QuerySet


class IdentityService(BaseService):
    """
    Maps identity provider subjects to User records.

    The provider is the source of truth for name, email and picture. They
    are copied onto the User when it is first seen and refreshed whenever
    a later token carries different values. Presence is never touched here.
    """

    @classmethod
    def upsert_from_provider(
        cls,
        external_id: str,
        name: str = "",
        email: str = "",
        avatar_ref: str = "",
    ) -> ServiceResult[User]:
        """
        Create the user for a subject on first sight, or patch its profile.

        Args:
            external_id: Provider subject (token `sub` claim)
            name: Display name claim
            email: Email claim
            avatar_ref: Picture URL claim

        Returns:
            ServiceResult with the User, or UNAUTHENTICATED when the subject
            is missing
        """
        external_id = (external_id or "").strip()
        if not external_id:
            return ServiceResult.failure(
                "Identity token has no subject",
                error_code=ErrorCode.UNAUTHENTICATED,
            )

        claims = {
            "name": (name or "").strip(),
            "email": User.objects.normalize_email((email or "").strip()),
            "avatar_ref": (avatar_ref or "").strip(),
        }

        user = User.objects.filter(external_id=external_id).first()
        if user is None:
            try:
                with transaction.atomic():
                    user = User.objects.create_user(
                        external_id=external_id,
                        is_online=False,
                        **claims,
                    )
            except IntegrityError:
                # Concurrent first sign-in created the row; use theirs
                user = User.objects.get(external_id=external_id)
            else:
                cls.get_logger().info(
                    f"Created user {user.id} for external identity {external_id}"
                )
                return ServiceResult.success(user)

        # Only overwrite with values the provider actually sent
        changed = [
            field_name
            for field_name, value in claims.items()
            if value and getattr(user, field_name) != value
        ]
        if changed:
            for field_name in changed:
                setattr(user, field_name, claims[field_name])
            user.save(update_fields=[*changed, "updated_at"])
            cls.get_logger().debug(f"Refreshed {', '.join(changed)} for user {user.id}")

        return ServiceResult.success(user)


class UserDirectoryService(BaseService):
    """
    Read access to the user directory plus the presence flag.
    """

    @classmethod
    def get_me(cls, caller: User) -> ServiceResult[User]:
        """Return the caller's own record, re-read from the database."""
        user = User.objects.filter(pk=caller.pk).first()
        if user is None:
            return ServiceResult.failure("User not found", error_code=ErrorCode.NOT_FOUND)
        return ServiceResult.success(user)

    @classmethod
    def list_users(cls, caller: User) -> QuerySet[User]:
        """
        Every active user except the caller, ordered by name.

        Used to pick participants for new direct and group conversations.
        """
        return (
            User.objects.filter(is_active=True)
            .exclude(pk=caller.pk)
            .order_by("name", "id")
        )

    @classmethod
    def get_user(cls, caller: User, user_id: int) -> ServiceResult[User]:
        """
        Look up a single user by id.

        Returns:
            ServiceResult with the User, or NOT_FOUND
        """
        user = User.objects.filter(pk=user_id, is_active=True).first()
        if user is None:
            cls.get_logger().debug(f"User {caller.id} looked up missing user {user_id}")
            return ServiceResult.failure("User not found", error_code=ErrorCode.NOT_FOUND)
        return ServiceResult.success(user)

    @classmethod
    def update_online_status(cls, caller: User, is_online: bool) -> ServiceResult[User]:
        """
        Set the caller's presence flag.

        Clients send this on mount, on visibility changes and on unload.
        There is no heartbeat; the flag keeps its last reported value.
        """
        updated = User.objects.filter(pk=caller.pk).update(is_online=is_online)
        if not updated:
            return ServiceResult.failure("User not found", error_code=ErrorCode.NOT_FOUND)

        caller.is_online = is_online
        cls.get_logger().info(
            f"User {caller.id} is now {'online' if is_online else 'offline'}"
        )
        return ServiceResult.success(caller)
