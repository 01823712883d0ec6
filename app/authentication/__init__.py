"""
Authentication application.

This app owns the user directory and resolves callers from identity
provider tokens.

Key components:
    - User model: Directory user keyed by the provider subject
    - IdentityJWTAuthentication: Bearer token -> User (created on first sight)
    - IdentityService / UserDirectoryService: Business logic

Usage:
    from authentication.models import User
    from authentication.services import UserDirectoryService
"""
