"""
Authentication views.

This module provides API views for the user directory:
- The caller's own record and presence flag
- The list of other users and single-user lookups

Related files:
    - serializers.py: Request/response serialization
    - services.py: Business logic (UserDirectoryService)
    - urls.py: URL routing
    - backends.py: Resolves the caller from the bearer token

Note:
    There are no login, logout or registration endpoints. Callers sign in
    with the external identity provider and send its token as
    `Authorization: Bearer <token>`; the first request creates their User.
"""

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import (
    PresenceUpdateSerializer,
    UserSerializer,
    UserSummarySerializer,
)
from authentication.services import UserDirectoryService


# =============================================================================
# Current User Views
# =============================================================================


class MeView(APIView):
    """
    API view for the caller's own record.

    URL: /api/v1/auth/me/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_me",
        summary="Get current user",
        description="Return the directory record of the authenticated caller.",
        tags=["Auth - Directory"],
        responses={200: UserSerializer},
    )
    def get(self, request):
        user = UserDirectoryService.get_me(request.user).raise_for_error()
        return Response(UserSerializer(user).data)


class PresenceView(APIView):
    """
    API view for the presence flag.

    URL: /api/v1/auth/me/presence/

    Clients post on mount, on visibility change and on unload.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="update_online_status",
        summary="Update online status",
        tags=["Auth - Directory"],
        request=PresenceUpdateSerializer,
        responses={200: UserSerializer},
    )
    def post(self, request):
        serializer = PresenceUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = UserDirectoryService.update_online_status(
            request.user,
            serializer.validated_data["is_online"],
        ).raise_for_error()

        return Response(UserSerializer(user).data, status=status.HTTP_200_OK)


# =============================================================================
# Directory Views
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_users",
        summary="List users",
        description="Every user except the caller, ordered by name.",
        tags=["Auth - Directory"],
    ),
    retrieve=extend_schema(
        operation_id="get_user",
        summary="Get user",
        tags=["Auth - Directory"],
    ),
)
class UserViewSet(viewsets.GenericViewSet):
    """
    Read-only access to other users.

    Endpoints:
        GET /api/v1/auth/users/       - List users except the caller
        GET /api/v1/auth/users/{id}/  - Single user
    """

    permission_classes = [IsAuthenticated]
    serializer_class = UserSummarySerializer
    pagination_class = None

    def get_queryset(self):
        return UserDirectoryService.list_users(self.request.user)

    def list(self, request):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response(serializer.data)

    def retrieve(self, request, pk=None):
        user = UserDirectoryService.get_user(request.user, pk).raise_for_error()
        return Response(self.get_serializer(user).data)
