"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User and UserManager tests
- test_services.py: IdentityService and UserDirectoryService tests
- test_backends.py: Token verification and caller resolution
- test_views.py: Directory API endpoint tests

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_services.py
"""
