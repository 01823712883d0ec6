"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Message operations (content limits, previews)
- Attachment kinds
- Reaction vocabulary
- Typing signal expiry
- Group limits

Import example:
    from chat.constants import MESSAGE_CONFIG, REACTION_CONFIG
"""

from typing import Final

from django.conf import settings


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Content limits
    MAX_CONTENT_LENGTH: Final[int] = 10000  # Characters

    # Conversation list preview
    PREVIEW_LENGTH: Final[int] = 100
    DELETED_PLACEHOLDER: Final[str] = "This message was deleted"


# =============================================================================
# Attachment Configuration
# =============================================================================


class ATTACHMENT_CONFIG:
    """
    Configuration for message attachments.

    The kind drives how clients render the attachment. When the sender does
    not name one it is derived from the uploaded file's MIME type.
    """

    KIND_IMAGE: Final[str] = "image"
    KIND_VIDEO: Final[str] = "video"
    KIND_AUDIO: Final[str] = "audio"
    KIND_PDF: Final[str] = "pdf"
    KIND_ARCHIVE: Final[str] = "archive"
    KIND_FILE: Final[str] = "file"

    KINDS: Final[tuple] = (
        KIND_IMAGE,
        KIND_VIDEO,
        KIND_AUDIO,
        KIND_PDF,
        KIND_ARCHIVE,
        KIND_FILE,
    )

    ARCHIVE_MIME_TYPES: Final[tuple] = (
        "application/zip",
        "application/x-zip-compressed",
        "application/x-tar",
        "application/gzip",
        "application/x-7z-compressed",
        "application/x-rar-compressed",
    )


# =============================================================================
# Reaction Configuration
# =============================================================================


class REACTION_CONFIG:
    """Configuration for message reactions."""

    # Max characters for a single emoji (handles variation selectors)
    MAX_EMOJI_LENGTH: Final[int] = 8

    # Closed vocabulary, in display order
    ALLOWED_EMOJIS: Final[tuple] = (
        "👍",
        "❤️",
        "😂",
        "😮",
        "😢",
        "🔥",
        "✨",
        "🚀",
        "💯",
        "✅",
        "🙌",
        "🎉",
        "🤝",
    )


# =============================================================================
# Typing Configuration
# =============================================================================


class TYPING_CONFIG:
    """Configuration for typing signals."""

    # A signal older than this is treated as "stopped typing" at read time
    STALE_AFTER_MS: Final[int] = getattr(settings, "TYPING_STALE_AFTER_MS", 2000)


# =============================================================================
# Group Configuration
# =============================================================================


class GROUP_CONFIG:
    """Configuration for group conversations."""

    MAX_NAME_LENGTH: Final[int] = 100
    MAX_MEMBERS: Final[int] = 256


# =============================================================================
# Realtime Configuration
# =============================================================================


class REALTIME_CONFIG:
    """Channel layer group names and event names for change notices."""

    CONVERSATION_GROUP_PREFIX: Final[str] = "conversation_"
    USER_GROUP_PREFIX: Final[str] = "user_"
    EVENT_TYPE: Final[str] = "conversation.changed"

    # Close codes for the WebSocket feed
    CLOSE_UNAUTHENTICATED: Final[int] = 4001
    CLOSE_NOT_FOUND: Final[int] = 4004
