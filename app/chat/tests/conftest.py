"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures for each membership role
- Conversation fixtures (direct and group)
- Completed upload fixtures for attachment sends
- API client helpers for authenticated requests

Usage:
    def test_example(group_conversation, owner_client):
        response = owner_client.get(f'/api/v1/chat/conversations/{group_conversation.id}/')
        assert response.status_code == 200
"""

from datetime import timedelta

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework.test import APIClient

from authentication.tests.conftest import bearer_token_for
from authentication.tests.factories import UserFactory
from chat.models import MembershipRole
from chat.tests.factories import (
    DirectConversationFactory,
    GroupConversationFactory,
    MembershipFactory,
)
from media.models import UploadHandle
from media.services import BlobStoreService
from media.tests.samples import SAMPLE_CONTENT


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def owner_user(db):
    """Create a user who owns the group conversation."""
    return UserFactory(name="Olivia Owner")


@pytest.fixture
def admin_user(db):
    """Create a user who is an admin of the group conversation."""
    return UserFactory(name="Adam Admin")


@pytest.fixture
def member_user(db):
    """Create a user who is a plain member of the group conversation."""
    return UserFactory(name="Mona Member")


@pytest.fixture
def outsider_user(db):
    """Create a user who belongs to no test conversation."""
    return UserFactory(name="Otto Outsider")


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def group_conversation(owner_user, admin_user, member_user):
    """
    Create a group with one owner, one admin and one member.

    Memberships are created in that order, so the admin joined before
    the member.
    """
    conversation = GroupConversationFactory(owner=owner_user, group_name="Team")
    MembershipFactory(conversation=conversation, user=admin_user, role=MembershipRole.ADMIN)
    MembershipFactory(conversation=conversation, user=member_user, role=MembershipRole.MEMBER)
    return conversation


@pytest.fixture
def direct_conversation(owner_user, member_user):
    """Create a direct conversation between owner_user and member_user."""
    return DirectConversationFactory(user1=owner_user, user2=member_user)


# =============================================================================
# Upload Fixtures
# =============================================================================


@pytest.fixture
def upload_for():
    """
    Build completed uploads owned by a given user.

    The bytes match content_type, since stored types are detected from
    content.

    Usage:
        storage_ref = upload_for(user, "photo.png", "image/png")
    """

    def make(user, filename="photo.png", content_type="image/png", data=None):
        if data is None:
            data = SAMPLE_CONTENT[content_type]
        handle = UploadHandle.objects.create(
            owner=user,
            expires_at=timezone.now() + timedelta(hours=1),
        )
        uploaded = SimpleUploadedFile(filename, data, content_type=content_type)
        BlobStoreService.store(user, str(handle.storage_ref), uploaded).raise_for_error()
        return str(handle.storage_ref)

    return make


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def client_for(db):
    """Build API clients that authenticate as a given user."""

    def make(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {bearer_token_for(user)}")
        return client

    return make


@pytest.fixture
def owner_client(client_for, owner_user):
    return client_for(owner_user)


@pytest.fixture
def admin_client(client_for, admin_user):
    return client_for(admin_user)


@pytest.fixture
def member_client(client_for, member_user):
    return client_for(member_user)


@pytest.fixture
def outsider_client(client_for, outsider_user):
    return client_for(outsider_user)
