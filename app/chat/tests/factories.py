"""
Factory Boy factories for chat models.

Provides realistic test data generation for:
- Conversation: Direct and group conversations
- Membership: User membership with a role
- Message: Text messages, optionally with an attachment
- MessageReaction: One user's emoji on a message
- TypingSignal: A typing timestamp

Factories write rows directly and publish no change notices. Tests that
care about notices or derived fields go through the services instead.

Usage:
    from chat.tests.factories import (
        DirectConversationFactory,
        GroupConversationFactory,
        MembershipFactory,
        MessageFactory,
    )

    # Group owned by a user, with two members
    conversation = GroupConversationFactory(owner=alice, members=[bob, carol])

    # Direct conversation between two users
    conversation = DirectConversationFactory(user1=alice, user2=bob)

    # Message in a conversation
    message = MessageFactory(conversation=conversation, sender=alice)
"""

import factory
from django.utils import timezone

from authentication.tests.factories import UserFactory
from chat.models import (
    Conversation,
    ConversationType,
    DirectConversationPair,
    Membership,
    MembershipRole,
    Message,
    MessageReaction,
    TypingSignal,
)


class GroupConversationFactory(factory.django.DjangoModelFactory):
    """
    Factory for group conversations.

    The owner gets an OWNER membership; users passed as `members` get
    MEMBER memberships, in order.

    Examples:
        conversation = GroupConversationFactory()
        conversation = GroupConversationFactory(owner=alice, members=[bob])
        conversation = GroupConversationFactory(is_deleted=True)
    """

    class Meta:
        model = Conversation
        skip_postgeneration_save = True

    conversation_type = ConversationType.GROUP
    group_name = factory.Sequence(lambda n: f"Group Chat {n}")
    group_avatar_ref = ""
    owner = factory.SubFactory(UserFactory)
    is_deleted = False
    deleted_at = factory.LazyAttribute(lambda o: timezone.now() if o.is_deleted else None)

    @factory.post_generation
    def members(self, create, extracted, **kwargs):
        """Add the owner membership, then any extra members."""
        if not create:
            return

        MembershipFactory(conversation=self, user=self.owner, role=MembershipRole.OWNER)
        for user in extracted or []:
            MembershipFactory(conversation=self, user=user, role=MembershipRole.MEMBER)


class DirectConversationFactory(factory.django.DjangoModelFactory):
    """
    Factory for direct (1:1) conversations.

    Creates the canonical DirectConversationPair and both memberships.

    Examples:
        conversation = DirectConversationFactory()
        conversation = DirectConversationFactory(user1=alice, user2=bob)
    """

    class Meta:
        model = Conversation

    conversation_type = ConversationType.DIRECT
    group_name = ""
    owner = None

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        user1 = kwargs.pop("user1", None) or UserFactory()
        user2 = kwargs.pop("user2", None) or UserFactory()

        conversation = super()._create(model_class, *args, **kwargs)

        lower_id, higher_id = DirectConversationPair.canonical(user1.id, user2.id)
        DirectConversationPair.objects.create(
            conversation=conversation,
            user_lower_id=lower_id,
            user_higher_id=higher_id,
        )
        MembershipFactory(conversation=conversation, user=user1)
        MembershipFactory(conversation=conversation, user=user2)
        return conversation


class MembershipFactory(factory.django.DjangoModelFactory):
    """
    Factory for Membership model.

    Examples:
        membership = MembershipFactory(conversation=conv, user=user)
        membership = MembershipFactory(conversation=conv, role=MembershipRole.ADMIN)
    """

    class Meta:
        model = Membership

    conversation = factory.SubFactory(GroupConversationFactory)
    user = factory.SubFactory(UserFactory)
    role = MembershipRole.MEMBER
    last_seen_message = None


class MessageFactory(factory.django.DjangoModelFactory):
    """
    Factory for Message model.

    Does not update conversation.last_message; use MessageService.send
    when the conversation list matters.

    Examples:
        message = MessageFactory(conversation=conv, sender=user)
        message = MessageFactory(is_deleted=True)
    """

    class Meta:
        model = Message

    conversation = factory.SubFactory(GroupConversationFactory)
    sender = factory.SubFactory(UserFactory)
    content = factory.Faker("sentence")
    attachment_ref = ""
    attachment_kind = ""
    is_deleted = False
    deleted_at = factory.LazyAttribute(lambda o: timezone.now() if o.is_deleted else None)


class MessageReactionFactory(factory.django.DjangoModelFactory):
    """Factory for MessageReaction model."""

    class Meta:
        model = MessageReaction

    message = factory.SubFactory(MessageFactory)
    user = factory.SubFactory(UserFactory)
    emoji = "👍"


class TypingSignalFactory(factory.django.DjangoModelFactory):
    """Factory for TypingSignal model."""

    class Meta:
        model = TypingSignal

    conversation = factory.SubFactory(GroupConversationFactory)
    user = factory.SubFactory(UserFactory)
    last_typed_at = factory.LazyFunction(timezone.now)
