"""
Custom user manager for identity-provider-backed users.

This module provides the UserManager class that creates users keyed by the
identity provider's subject (external_id) instead of a username or email.

Related files:
    - models.py: User model that uses this manager

Security:
    - Regular users get an unusable password; they authenticate with tokens
    - Email addresses are normalized (lowercase domain)
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Custom manager for User model keyed by external_id.

    Usage:
        # Create a directory user (normally done by IdentityService)
        user = User.objects.create_user(external_id="user_2abc", name="Ada")

        # Create a superuser for the admin
        admin = User.objects.create_superuser(
            external_id="ops-admin",
            password="adminpassword",
        )
    """

    def create_user(self, external_id, password=None, **extra_fields):
        """
        Create and save a user with the given external_id.

        Args:
            external_id: Identity provider subject (required)
            password: Optional password, only useful for staff
            **extra_fields: Additional fields (name, email, avatar_ref, ...)

        Returns:
            User: The created user instance

        Raises:
            ValueError: If external_id is not provided
        """
        if not external_id:
            raise ValueError("The external_id field must be set")

        extra_fields["email"] = self.normalize_email(extra_fields.get("email") or "")
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        user = self.model(external_id=external_id, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, external_id, password=None, **extra_fields):
        """
        Create and save a superuser.

        Raises:
            ValueError: If is_staff or is_superuser is not True
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(external_id, password, **extra_fields)
