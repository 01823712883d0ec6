"""
Create the chat tables.

Conversation.last_message is added after Message exists because the two
tables reference each other.
"""

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _timestamps():
    return [
        (
            "created_at",
            models.DateTimeField(
                auto_now_add=True,
                db_index=True,
                help_text="Timestamp when this record was created",
            ),
        ),
        (
            "updated_at",
            models.DateTimeField(
                auto_now=True,
                help_text="Timestamp when this record was last modified",
            ),
        ),
    ]


def _soft_delete():
    return [
        (
            "is_deleted",
            models.BooleanField(
                db_index=True,
                default=False,
                help_text="Whether this record has been soft deleted",
            ),
        ),
        (
            "deleted_at",
            models.DateTimeField(
                blank=True,
                null=True,
                help_text="Timestamp when this record was soft deleted",
            ),
        ),
    ]


def _id():
    return (
        "id",
        models.BigAutoField(
            auto_created=True,
            primary_key=True,
            serialize=False,
            verbose_name="ID",
        ),
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Conversation",
            fields=[
                _id(),
                *_timestamps(),
                *_soft_delete(),
                (
                    "conversation_type",
                    models.CharField(
                        choices=[("direct", "Direct Message"), ("group", "Group")],
                        db_index=True,
                        default="group",
                        help_text="Type of conversation (direct or group)",
                        max_length=10,
                    ),
                ),
                (
                    "group_name",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Name for group conversations (empty for direct)",
                        max_length=100,
                    ),
                ),
                (
                    "group_avatar_ref",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Group avatar URL or storage reference",
                        max_length=1024,
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        help_text="Owner of a group conversation (null for direct)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="owned_conversations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_conversation",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["conversation_type", "is_deleted"],
                        name="chat_conv_type_deleted_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DirectConversationPair",
            fields=[
                (
                    "conversation",
                    models.OneToOneField(
                        help_text="The direct conversation this pair represents",
                        on_delete=django.db.models.deletion.CASCADE,
                        primary_key=True,
                        related_name="direct_pair",
                        serialize=False,
                        to="chat.conversation",
                    ),
                ),
                (
                    "user_lower",
                    models.ForeignKey(
                        help_text="User with lower ID in this conversation pair",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user_higher",
                    models.ForeignKey(
                        help_text="User with higher ID in this conversation pair",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_direct_conversation_pair",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user_lower", "user_higher"),
                        name="unique_direct_conversation_pair",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("user_lower_id__lt", models.F("user_higher_id"))),
                        name="user_lower_less_than_higher",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                _id(),
                *_timestamps(),
                *_soft_delete(),
                (
                    "content",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Message text",
                        max_length=10000,
                    ),
                ),
                (
                    "attachment_ref",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Storage reference of the attached file",
                        max_length=255,
                    ),
                ),
                (
                    "attachment_kind",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Kind of attachment, used by clients to pick a renderer",
                        max_length=20,
                    ),
                ),
                (
                    "conversation",
                    models.ForeignKey(
                        help_text="Conversation this message belongs to",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="messages",
                        to="chat.conversation",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent this message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["conversation", "created_at", "id"],
                        name="chat_msg_conv_order_idx",
                    ),
                    models.Index(
                        fields=["conversation", "sender"],
                        name="chat_msg_conv_sender_idx",
                    ),
                ],
            },
        ),
        migrations.AddField(
            model_name="conversation",
            name="last_message",
            field=models.ForeignKey(
                blank=True,
                help_text="Most recent message in this conversation",
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="chat.message",
            ),
        ),
        migrations.CreateModel(
            name="Membership",
            fields=[
                _id(),
                *_timestamps(),
                (
                    "role",
                    models.CharField(
                        choices=[("owner", "Owner"), ("admin", "Admin"), ("member", "Member")],
                        default="member",
                        help_text="Role in the conversation",
                        max_length=10,
                    ),
                ),
                (
                    "conversation",
                    models.ForeignKey(
                        help_text="Conversation this membership belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="chat.conversation",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Member of the conversation",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "last_seen_message",
                    models.ForeignKey(
                        blank=True,
                        help_text="Newest message this member has read",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="chat.message",
                    ),
                ),
            ],
            options={
                "db_table": "chat_membership",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["conversation", "role", "created_at"],
                        name="chat_member_conv_role_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("conversation", "user"),
                        name="unique_conversation_membership",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MessageReaction",
            fields=[
                _id(),
                *_timestamps(),
                (
                    "emoji",
                    models.CharField(
                        help_text="Emoji from the fixed reaction vocabulary",
                        max_length=8,
                    ),
                ),
                (
                    "message",
                    models.ForeignKey(
                        help_text="Message this reaction belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reactions",
                        to="chat.message",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="User who added this reaction",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="message_reactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message_reaction",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(
                        fields=["message", "emoji"],
                        name="chat_reaction_msg_emoji_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("message", "user", "emoji"),
                        name="unique_user_message_emoji_reaction",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TypingSignal",
            fields=[
                _id(),
                (
                    "last_typed_at",
                    models.DateTimeField(help_text="When the user last reported typing"),
                ),
                (
                    "conversation",
                    models.ForeignKey(
                        help_text="Conversation being typed in",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="typing_signals",
                        to="chat.conversation",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="User who is typing",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="typing_signals",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_typing_signal",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("conversation", "user"),
                        name="unique_typing_signal",
                    ),
                ],
            },
        ),
    ]
