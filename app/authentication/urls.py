"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/me/            - Current user (GET)
    /api/v1/auth/me/presence/   - Online flag (POST)
    /api/v1/auth/users/         - Other users (GET)
    /api/v1/auth/users/{id}/    - Single user (GET)
"""

from django.urls import path

from authentication.views import MeView, PresenceView, UserViewSet

app_name = "authentication"

urlpatterns = [
    # Current user
    path("me/", MeView.as_view(), name="me"),
    path("me/presence/", PresenceView.as_view(), name="presence"),
    # Directory
    path("users/", UserViewSet.as_view({"get": "list"}), name="user-list"),
    path(
        "users/<int:pk>/",
        UserViewSet.as_view({"get": "retrieve"}),
        name="user-detail",
    ),
]
