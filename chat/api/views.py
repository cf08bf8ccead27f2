"""Chat API views.

Participants (and any admin) can read a chat and post to it. Admins become
participants the first time they post.
"""

import logging

from django.db import transaction
from django.db.models import Prefetch
from django.utils import timezone
from rest_framework import generics, status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.models import Chat, ChatMessage, ChatParticipant
from common.api.lookups import parse_pk
from common.exceptions import InvalidState
from profiles.api.permissions import get_role, is_admin
from .permissions import IsChatParticipantOrAdmin
from .serializers import (
    ChatCreateSerializer,
    ChatListSerializer,
    ChatMessageCreateSerializer,
    ChatMessageSerializer,
    ChatSerializer,
)

logger = logging.getLogger(__name__)

LISTED_STATUSES = (Chat.Status.ACTIVE, Chat.Status.CLOSED)


def _chats():
    return Chat.objects.select_related("related_order", "related_quote").prefetch_related(
        Prefetch("participants", queryset=ChatParticipant.objects.select_related("user"))
    )


def _get_chat(pk) -> Chat:
    chat = _chats().filter(pk=parse_pk(pk, "chat_id")).first()
    if chat is None:
        raise NotFound("Chat not found.")
    return chat


class ChatListCreateAPIView(generics.ListCreateAPIView):
    """GET: active/closed chats of the caller (admins: all), newest activity first.
    POST: open a chat with a first message.
    """

    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_serializer_class(self):
        return ChatListSerializer if self.request.method == "GET" else ChatCreateSerializer

    def get_queryset(self):
        qs = _chats().filter(status__in=LISTED_STATUSES)
        if not is_admin(self.request.user):
            qs = qs.filter(participants__user=self.request.user)
        return qs.order_by("-last_activity", "-id")

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        chat = serializer.save()
        logger.info("Chat %s opened by %s", chat.id, request.user.id)
        return Response(ChatSerializer(_get_chat(chat.pk)).data, status=status.HTTP_201_CREATED)


class ChatDetailAPIView(APIView):
    """GET /api/v1/chat/{id}/ -> chat with its messages; marks it seen for participants."""

    permission_classes = [IsAuthenticated, IsChatParticipantOrAdmin]

    def get(self, request, pk):
        chat = _get_chat(pk)
        self.check_object_permissions(request, chat)
        ChatParticipant.objects.filter(chat=chat, user=request.user).update(last_seen=timezone.now())
        return Response(ChatSerializer(chat).data, status=status.HTTP_200_OK)


class ChatMessageCreateAPIView(APIView):
    """POST /api/v1/chat/{id}/messages/ -> append a message to an active chat."""

    permission_classes = [IsAuthenticated, IsChatParticipantOrAdmin]

    def post(self, request, pk):
        chat = _get_chat(pk)
        self.check_object_permissions(request, chat)
        serializer = ChatMessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if chat.status != Chat.Status.ACTIVE:
            raise InvalidState(f"Chat is {chat.status}; messages can only be posted to active chats.")

        now = timezone.now()
        with transaction.atomic():
            participant, joined = ChatParticipant.objects.get_or_create(
                chat=chat, user=request.user, defaults={"role": get_role(request.user)}
            )
            if not joined:
                ChatParticipant.objects.filter(pk=participant.pk).update(last_seen=now)
            message = ChatMessage.objects.create(
                chat=chat, sender=request.user, content=serializer.validated_data["content"]
            )
            Chat.objects.filter(pk=chat.pk).update(last_activity=now, updated_at=now)
        if joined:
            logger.info("User %s joined chat %s", request.user.id, chat.id)
        return Response(ChatMessageSerializer(message).data, status=status.HTTP_201_CREATED)
