"""
Authentication models.

This module defines the directory user:
- User: A person known to the system, created the first time the identity
  provider vouches for them and never deleted in-scope.

Identity is external. Users do not sign up or log in here; a signed token
from the identity provider names the user by its `sub` claim, which is
stored as external_id. Passwords exist only so staff can use the admin.

Related files:
    - managers.py: Custom user manager for external-id-based creation
    - services.py: IdentityService (upsert) and UserDirectoryService
    - backends.py: DRF authentication resolving tokens to users
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.db.models.functions import Lower

from authentication.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Directory user keyed by the identity provider's subject.

    Fields:
        external_id: Identity provider subject (unique, used as USERNAME_FIELD)
        name: Display name, refreshed from the provider on every sign-in
        email: Email from the provider, may be blank
        avatar_ref: Provider picture URL or blob store reference
        is_online: Presence flag, set only by explicit presence signals
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user was first seen
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            external_id="user_2abc",
            name="Ada",
            email="ada@example.com",
        )
    """

    external_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Subject identifier issued by the identity provider",
    )
    name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Display name",
    )
    email = models.EmailField(
        max_length=254,
        blank=True,
        default="",
        db_index=True,
        help_text="Email address reported by the identity provider",
    )
    avatar_ref = models.CharField(
        max_length=1024,
        blank=True,
        default="",
        help_text="Avatar image URL or storage reference",
    )

    # Presence
    is_online = models.BooleanField(
        default=False,
        help_text="Whether the user's client last reported itself online",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    # Timestamps
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user was first seen",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "external_id"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        db_table = "authentication_user"
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["name", "id"]
        indexes = [
            models.Index(Lower("name"), name="auth_user_name_lower_idx"),
        ]

    def __str__(self):
        return self.name or self.email or self.external_id

    def get_full_name(self):
        return self.name or self.email or self.external_id

    def get_short_name(self):
        if self.name:
            return self.name.split()[0]
        return self.email.split("@")[0] if self.email else self.external_id
