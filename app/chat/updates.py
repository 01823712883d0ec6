"""
Partial-update structs for chat entities.

A partial update names only the fields the caller sent. Unsent fields are
None and keep their stored value; merging is a pure function so the rule
does not depend on how the request was parsed or how the row is saved.

Usage:
    update = GroupDetailsUpdate(group_name="Weekend plans")
    merged = update.merge(GroupDetails.of(conversation))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chat.models import Conversation


@dataclass(frozen=True)
class GroupDetails:
    """Editable details of a group conversation."""

    group_name: str
    group_avatar_ref: str

    @classmethod
    def of(cls, conversation: Conversation) -> GroupDetails:
        return cls(
            group_name=conversation.group_name,
            group_avatar_ref=conversation.group_avatar_ref,
        )


@dataclass(frozen=True)
class GroupDetailsUpdate:
    """
    Requested change to group details.

    Attributes:
        group_name: New name, or None to keep the current one
        group_avatar_ref: New avatar reference, or None to keep the current
            one. An empty string clears the avatar.
    """

    group_name: str | None = None
    group_avatar_ref: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.group_name is None and self.group_avatar_ref is None

    def normalized(self) -> GroupDetailsUpdate:
        """Trim provided values; blank names stay blank for validation."""
        return GroupDetailsUpdate(
            group_name=self.group_name.strip() if self.group_name is not None else None,
            group_avatar_ref=(
                self.group_avatar_ref.strip() if self.group_avatar_ref is not None else None
            ),
        )

    def merge(self, current: GroupDetails) -> GroupDetails:
        """Apply provided fields over current ones."""
        return GroupDetails(
            group_name=current.group_name if self.group_name is None else self.group_name,
            group_avatar_ref=(
                current.group_avatar_ref
                if self.group_avatar_ref is None
                else self.group_avatar_ref
            ),
        )

    def changed_fields(self, current: GroupDetails) -> list[str]:
        """Names of fields whose merged value differs from current."""
        merged = self.merge(current)
        return [
            name
            for name in ("group_name", "group_avatar_ref")
            if getattr(merged, name) != getattr(current, name)
        ]
