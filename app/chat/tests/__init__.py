"""
Tests for chat app.

This package contains test modules for:
- test_authorization.py: Role predicates and participant lookups
- test_updates.py: Partial group detail updates
- test_services.py: Conversation, membership and message services
- test_reactions.py: Reaction toggles and aggregates
- test_typing.py: Typing signals and read-time expiry
- test_unread.py: Read pointers and unread counts
- test_events.py: Change notices on the channel layer
- test_views.py: REST API endpoint tests
- test_consumers.py: WebSocket consumer tests
- test_integration.py: Multi-user journeys

Usage:
    pytest chat/tests/
    pytest chat/tests/test_consumers.py
"""
