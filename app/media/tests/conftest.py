"""
Test fixtures for media app.

Provides fixtures for:
- Sample uploaded files
- Pending and completed upload handles
- Authenticated test clients
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework.test import APIClient

from authentication.tests.conftest import bearer_token_for
from authentication.tests.factories import UserFactory
from media.models import UploadHandle
from media.services.blob_store import BlobStoreService
from media.tests.samples import PDF_BYTES, PNG_BYTES


# =============================================================================
# User & Client Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create the uploading user."""
    return UserFactory()


@pytest.fixture
def other_user(db):
    """Create a user who does not own the test handles."""
    return UserFactory()


@pytest.fixture
def api_client() -> APIClient:
    """Return unauthenticated API client."""
    return APIClient()


@pytest.fixture
def authenticated_client(user) -> APIClient:
    """Return API client authenticated as `user`."""
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {bearer_token_for(user)}")
    return client


@pytest.fixture
def other_client(other_user) -> APIClient:
    """Return API client authenticated as `other_user`."""
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {bearer_token_for(other_user)}")
    return client


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def sample_png() -> SimpleUploadedFile:
    """A small PNG image."""
    return SimpleUploadedFile(
        "photo.png",
        PNG_BYTES,
        content_type="image/png",
    )


@pytest.fixture
def sample_pdf() -> SimpleUploadedFile:
    """A small PDF document."""
    return SimpleUploadedFile(
        "report.pdf",
        PDF_BYTES,
        content_type="application/pdf",
    )


# =============================================================================
# Handle Fixtures
# =============================================================================


@pytest.fixture
def pending_handle(user) -> UploadHandle:
    """A fresh pending handle owned by `user`."""
    return UploadHandle.objects.create(
        owner=user,
        expires_at=timezone.now() + timedelta(hours=1),
    )


@pytest.fixture
def expired_handle(user) -> UploadHandle:
    """A pending handle whose upload window has closed."""
    return UploadHandle.objects.create(
        owner=user,
        expires_at=timezone.now() - timedelta(seconds=1),
    )


@pytest.fixture
def completed_handle(user, sample_png) -> UploadHandle:
    """A handle whose bytes have been stored."""
    handle = UploadHandle.objects.create(
        owner=user,
        expires_at=timezone.now() + timedelta(hours=1),
    )
    return BlobStoreService.store(user, str(handle.storage_ref), sample_png).data
