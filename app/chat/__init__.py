"""
Chat app for real-time messaging.

This app handles:
- Conversations (direct and group) and their memberships
- Message sending, history, soft deletion and shared media
- Reactions from a fixed emoji vocabulary
- Typing signals and read pointers
- WebSocket change notices

Related apps:
    - authentication: User model for members
    - media: Attachment uploads and URL resolution

WebSocket Support:
    Uses Django Channels for change notices.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.services import ConversationService, MessageService

    conversation, _ = ConversationService.create_or_get_direct(
        user, other_user.id
    ).raise_for_error()

    MessageService.send(user, conversation.id, content="Hello!")
"""
