"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - User directory endpoints
        me/                        - Current user
        me/presence/               - Update online flag
        users/                     - Everyone except the caller
        users/{id}/                - Single user
    /api/v1/chat/                  - Chat endpoints
        conversations/             - Conversation list
        conversations/direct/      - Create or get a direct conversation
        conversations/groups/      - Create a group
        conversations/{id}/        - Conversation detail/update/delete
        conversations/{id}/read/   - Mark conversation as read
        conversations/{id}/leave/  - Leave conversation
        conversations/{id}/members/ - Member list/add
        conversations/{id}/members/{user_id}/ - Remove/promote/demote member
        conversations/{id}/messages/ - Message list/send
        conversations/{id}/media/  - Shared attachments
        conversations/{id}/typing/ - Typing signals
        messages/{id}/             - Message delete
        messages/{id}/reactions/toggle/ - Toggle a reaction
    /api/v1/media/                 - Blob store endpoints
        uploads/                   - Request an upload handle
        uploads/{storage_ref}/     - Upload bytes for a handle

WebSocket routes are declared in chat.routing and served by config.asgi.

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # User directory
    path("auth/", include("authentication.urls")),
    # Chat
    path("chat/", include("chat.urls")),
    # Blob store
    path("media/", include("media.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# Serve uploaded attachments from MEDIA_ROOT during local development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Chat Admin"
admin.site.site_title = "Chat Admin Portal"
admin.site.index_title = "Conversations, members and messages"
