"""
URL configuration for chat API.

URL Structure:
    Conversations:
        /conversations/                          GET
        /conversations/direct/                   POST
        /conversations/groups/                   POST
        /conversations/{id}/                     GET, PATCH, DELETE
        /conversations/{id}/read/                POST
        /conversations/{id}/leave/               POST
        /conversations/{id}/media/               GET
        /conversations/{id}/media/count/         GET
        /conversations/{id}/typing/              GET, POST, DELETE

    Members:
        /conversations/{id}/members/             GET, POST
        /conversations/{id}/members/{user_id}/   POST

    Messages:
        /conversations/{id}/messages/            GET, POST
        /messages/{pk}/                          DELETE
        /messages/{pk}/reactions/toggle/         POST

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from chat.views import ConversationViewSet, MessageViewSet

# Main router for conversations
router = DefaultRouter()
router.register(r"conversations", ConversationViewSet, basename="conversation")

app_name = "chat"

urlpatterns = [
    path("", include(router.urls)),
    # Nested routes for messages
    path(
        "conversations/<int:conversation_pk>/messages/",
        MessageViewSet.as_view({"get": "list", "post": "create"}),
        name="conversation-message-list",
    ),
    path(
        "messages/<int:pk>/",
        MessageViewSet.as_view({"delete": "destroy"}),
        name="message-detail",
    ),
    path(
        "messages/<int:pk>/reactions/toggle/",
        MessageViewSet.as_view({"post": "toggle_reaction"}),
        name="message-reaction-toggle",
    ),
]
