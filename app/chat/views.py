"""
ViewSets for chat API.

This module provides REST API endpoints for the chat system:
- ConversationViewSet: Conversations, membership, typing and shared media
- MessageViewSet: Message list/send (nested under conversation), delete
  and reaction toggle

URL Structure:
    /api/v1/chat/conversations/                          GET
    /api/v1/chat/conversations/direct/                   POST
    /api/v1/chat/conversations/groups/                   POST
    /api/v1/chat/conversations/{id}/                     GET, PATCH, DELETE
    /api/v1/chat/conversations/{id}/read/                POST
    /api/v1/chat/conversations/{id}/leave/               POST
    /api/v1/chat/conversations/{id}/members/             GET, POST
    /api/v1/chat/conversations/{id}/members/{user_id}/   POST
    /api/v1/chat/conversations/{id}/media/               GET
    /api/v1/chat/conversations/{id}/media/count/         GET
    /api/v1/chat/conversations/{id}/typing/              GET, POST, DELETE
    /api/v1/chat/conversations/{id}/messages/            GET, POST
    /api/v1/chat/messages/{id}/                          DELETE
    /api/v1/chat/messages/{id}/reactions/toggle/         POST

Design Decisions:
    - Views parse input, call one service method and serialize the result
    - Authorization lives in the services, which re-read membership on
      every call; views only require an authenticated caller
    - Failed ServiceResults are raised with raise_for_error() and rendered
      by core.exception_handler
    - Lists are returned whole, without pagination
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from chat.serializers import (
    AddMembersSerializer,
    ConversationSummarySerializer,
    DirectConversationCreateSerializer,
    GroupCreateSerializer,
    GroupDetailsUpdateSerializer,
    ManageMemberSerializer,
    MemberSerializer,
    MessageCreateSerializer,
    MessageSerializer,
    ReactionToggleResultSerializer,
    ReactionToggleSerializer,
    ReadStateSerializer,
    SharedMediaCountSerializer,
    SharedMediaSerializer,
    TypingUsersSerializer,
)
from chat.services import (
    ConversationService,
    MembershipService,
    MessageService,
    ReactionService,
    TypingService,
    count_unread,
)


# =============================================================================
# Conversation ViewSet
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_conversations",
        summary="List conversations",
        description="Every conversation of the caller, most recent activity first.",
        tags=["Chat - Conversations"],
    ),
    retrieve=extend_schema(
        operation_id="get_conversation",
        summary="Get conversation",
        tags=["Chat - Conversations"],
    ),
    partial_update=extend_schema(
        operation_id="update_group_details",
        summary="Update group details",
        request=GroupDetailsUpdateSerializer,
        responses={200: ConversationSummarySerializer},
        tags=["Chat - Conversations"],
    ),
    destroy=extend_schema(
        operation_id="delete_group",
        summary="Delete group",
        responses={204: None},
        tags=["Chat - Conversations"],
    ),
)
class ConversationViewSet(viewsets.GenericViewSet):
    """
    ViewSet for conversations.

    Endpoints:
        GET    /conversations/              - List caller's conversations
        POST   /conversations/direct/       - Create or get a DM
        POST   /conversations/groups/       - Create a group
        GET    /conversations/{id}/         - Get conversation
        PATCH  /conversations/{id}/         - Update group details
        DELETE /conversations/{id}/         - Delete group (owner only)
        POST   /conversations/{id}/read/    - Mark as read
        POST   /conversations/{id}/leave/   - Leave group
        ...    members, media and typing actions below
    """

    permission_classes = [IsAuthenticated]
    serializer_class = ConversationSummarySerializer
    pagination_class = None
    lookup_value_regex = r"\d+"

    def _summary_response(self, conversation_id, status_code=status.HTTP_200_OK):
        summary = ConversationService.get_by_id(self.request.user, conversation_id).raise_for_error()
        return Response(ConversationSummarySerializer(summary).data, status=status_code)

    def list(self, request):
        summaries = ConversationService.list_for_user(request.user)
        return Response(ConversationSummarySerializer(summaries, many=True).data)

    def retrieve(self, request, pk=None):
        return self._summary_response(int(pk))

    def partial_update(self, request, pk=None):
        serializer = GroupDetailsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ConversationService.update_group_details(
            request.user,
            int(pk),
            serializer.to_update(),
        ).raise_for_error()
        return self._summary_response(int(pk))

    def destroy(self, request, pk=None):
        ConversationService.delete_group(request.user, int(pk)).raise_for_error()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="create_or_get_direct_conversation",
        summary="Create or get direct conversation",
        description="Returns 201 when the conversation was created, 200 when it existed.",
        request=DirectConversationCreateSerializer,
        responses={200: ConversationSummarySerializer, 201: ConversationSummarySerializer},
        tags=["Chat - Conversations"],
    )
    @action(detail=False, methods=["post"])
    def direct(self, request):
        serializer = DirectConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        conversation, created = ConversationService.create_or_get_direct(
            request.user,
            serializer.validated_data["user_id"],
        ).raise_for_error()

        return self._summary_response(
            conversation.id,
            status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @extend_schema(
        operation_id="create_group",
        summary="Create group",
        request=GroupCreateSerializer,
        responses={201: ConversationSummarySerializer},
        tags=["Chat - Conversations"],
    )
    @action(detail=False, methods=["post"])
    def groups(self, request):
        serializer = GroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        conversation = ConversationService.create_group(
            request.user,
            data["group_name"],
            data["member_ids"],
            group_avatar_ref=data["group_avatar_ref"],
        ).raise_for_error()

        return self._summary_response(conversation.id, status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="mark_conversation_read",
        summary="Mark conversation as read",
        request=None,
        responses={200: ReadStateSerializer},
        tags=["Chat - Conversations"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        membership = MessageService.mark_read(request.user, int(pk)).raise_for_error()
        data = {
            "conversation_id": membership.conversation_id,
            "last_seen_message_id": membership.last_seen_message_id,
            "unread_count": count_unread(membership),
        }
        return Response(ReadStateSerializer(data).data)

    @extend_schema(
        operation_id="leave_group",
        summary="Leave group",
        request=None,
        responses={204: None},
        tags=["Chat - Conversations"],
    )
    @action(detail=True, methods=["post"])
    def leave(self, request, pk=None):
        MembershipService.leave(request.user, int(pk)).raise_for_error()
        return Response(status=status.HTTP_204_NO_CONTENT)

    # =========================================================================
    # Members
    # =========================================================================

    @extend_schema(
        methods=["GET"],
        operation_id="list_group_members",
        summary="List members",
        responses={200: MemberSerializer(many=True)},
        tags=["Chat - Members"],
    )
    @extend_schema(
        methods=["POST"],
        operation_id="add_group_members",
        summary="Add members",
        request=AddMembersSerializer,
        responses={201: MemberSerializer(many=True)},
        tags=["Chat - Members"],
    )
    @action(detail=True, methods=["get", "post"])
    def members(self, request, pk=None):
        if request.method == "GET":
            members = MembershipService.list_members(request.user, int(pk)).raise_for_error()
            return Response(MemberSerializer(members, many=True).data)

        serializer = AddMembersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        added = MembershipService.add_members(
            request.user,
            int(pk),
            serializer.validated_data["user_ids"],
        ).raise_for_error()
        return Response(MemberSerializer(added, many=True).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="manage_group_member",
        summary="Remove, promote or demote a member",
        request=ManageMemberSerializer,
        responses={
            200: MemberSerializer,
            204: OpenApiResponse(description="Member removed"),
        },
        tags=["Chat - Members"],
    )
    @action(detail=True, methods=["post"], url_path=r"members/(?P<user_id>\d+)")
    def manage_member(self, request, pk=None, user_id=None):
        serializer = ManageMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        membership = MembershipService.manage_member(
            request.user,
            int(pk),
            int(user_id),
            serializer.validated_data["action"],
        ).raise_for_error()

        if membership is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(MemberSerializer(membership).data)

    # =========================================================================
    # Shared Media
    # =========================================================================

    @extend_schema(
        operation_id="list_shared_media",
        summary="List shared media",
        responses={200: SharedMediaSerializer(many=True)},
        tags=["Chat - Media"],
    )
    @action(detail=True, methods=["get"])
    def media(self, request, pk=None):
        items = MessageService.shared_media(request.user, int(pk))
        return Response(SharedMediaSerializer(items, many=True).data)

    @extend_schema(
        operation_id="count_shared_media",
        summary="Count shared media",
        responses={200: SharedMediaCountSerializer},
        tags=["Chat - Media"],
    )
    @action(detail=True, methods=["get"], url_path="media/count")
    def media_count(self, request, pk=None):
        count = MessageService.shared_media_count(request.user, int(pk))
        return Response(SharedMediaCountSerializer({"count": count}).data)

    # =========================================================================
    # Typing
    # =========================================================================

    @extend_schema(
        methods=["GET"],
        operation_id="list_typing_users",
        summary="List typing users",
        responses={200: TypingUsersSerializer},
        tags=["Chat - Typing"],
    )
    @extend_schema(
        methods=["POST"],
        operation_id="set_typing",
        summary="Signal typing",
        request=None,
        responses={204: None},
        tags=["Chat - Typing"],
    )
    @extend_schema(
        methods=["DELETE"],
        operation_id="clear_typing",
        summary="Clear typing",
        responses={204: None},
        tags=["Chat - Typing"],
    )
    @action(detail=True, methods=["get", "post", "delete"])
    def typing(self, request, pk=None):
        if request.method == "GET":
            users = TypingService.list_typing(request.user, int(pk))
            return Response(TypingUsersSerializer({"users": users}).data)

        if request.method == "POST":
            TypingService.set_typing(request.user, int(pk)).raise_for_error()
        else:
            TypingService.clear_typing(request.user, int(pk)).raise_for_error()
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Message ViewSet
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_messages",
        summary="List messages",
        description="Messages oldest first. Empty for conversations the caller is not in.",
        responses={200: MessageSerializer(many=True)},
        tags=["Chat - Messages"],
    ),
    create=extend_schema(
        operation_id="send_message",
        summary="Send message",
        request=MessageCreateSerializer,
        responses={201: MessageSerializer},
        tags=["Chat - Messages"],
    ),
    destroy=extend_schema(
        operation_id="delete_message",
        summary="Delete message",
        description="Soft delete. Only the sender may delete a message.",
        responses={204: None},
        tags=["Chat - Messages"],
    ),
)
class MessageViewSet(viewsets.GenericViewSet):
    """
    ViewSet for messages.

    Endpoints:
        GET    /conversations/{conversation_pk}/messages/  - List messages
        POST   /conversations/{conversation_pk}/messages/  - Send message
        DELETE /messages/{pk}/                             - Delete message
        POST   /messages/{pk}/reactions/toggle/            - Toggle reaction
    """

    permission_classes = [IsAuthenticated]
    serializer_class = MessageSerializer
    pagination_class = None

    def list(self, request, conversation_pk=None):
        views = MessageService.list_messages(request.user, int(conversation_pk))
        return Response(MessageSerializer(views, many=True).data)

    def create(self, request, conversation_pk=None):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        message = MessageService.send(
            request.user,
            int(conversation_pk),
            content=data["content"],
            attachment_ref=data["attachment_ref"],
            attachment_kind=data["attachment_kind"],
        ).raise_for_error()

        view = MessageService.view_for(request.user, message)
        return Response(MessageSerializer(view).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        MessageService.soft_delete(request.user, int(pk)).raise_for_error()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="toggle_reaction",
        summary="Toggle reaction",
        description="Adds the caller's reaction, or removes it if already present.",
        request=ReactionToggleSerializer,
        responses={200: ReactionToggleResultSerializer},
        tags=["Chat - Reactions"],
    )
    @action(detail=True, methods=["post"], url_path="reactions/toggle")
    def toggle_reaction(self, request, pk=None):
        serializer = ReactionToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ReactionService.toggle(
            request.user,
            int(pk),
            serializer.validated_data["emoji"],
        ).raise_for_error()
        return Response(ReactionToggleResultSerializer(result).data)
