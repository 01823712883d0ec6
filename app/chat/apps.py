"""
Chat application configuration.

This app provides the chat system with:
- Direct (1:1) and group conversations
- Role-based membership (owner, admin, member)
- Soft-deleted messages with attachments and reactions
- Typing signals and unread counts derived on read
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
