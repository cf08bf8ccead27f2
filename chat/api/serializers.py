"""Chat API serializers.

`ChatCreateSerializer.create` opens the conversation: the chat row, the
caller as first participant and the opening message are written together.
"""

from django.db import transaction
from rest_framework import serializers

from chat.models import Chat, ChatMessage, ChatParticipant
from orders.models import Order
from profiles.api.permissions import get_role, is_admin
from quotes.models import Quote


def _display_name(user):
    full = f"{user.first_name} {user.last_name}".strip()
    return full or user.username


class ChatParticipantSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()

    class Meta:
        model = ChatParticipant
        fields = ["user", "name", "role", "joined_at", "last_seen"]

    def get_name(self, obj):
        return _display_name(obj.user)


class ChatMessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.SerializerMethodField()

    class Meta:
        model = ChatMessage
        fields = ["id", "sender", "sender_name", "content", "message_type", "timestamp"]
        read_only_fields = fields

    def get_sender_name(self, obj):
        return _display_name(obj.sender)


class ChatListSerializer(serializers.ModelSerializer):
    participants = ChatParticipantSerializer(many=True, read_only=True)
    related_order_number = serializers.CharField(source="related_order.order_number", default=None)
    related_quote_number = serializers.CharField(source="related_quote.quote_number", default=None)

    class Meta:
        model = Chat
        fields = [
            "id",
            "type",
            "subject",
            "status",
            "priority",
            "participants",
            "related_order",
            "related_order_number",
            "related_quote",
            "related_quote_number",
            "created_by",
            "last_activity",
            "created_at",
        ]
        read_only_fields = fields


class ChatSerializer(ChatListSerializer):
    messages = ChatMessageSerializer(many=True, read_only=True)

    class Meta(ChatListSerializer.Meta):
        fields = ChatListSerializer.Meta.fields + ["messages"]
        read_only_fields = fields


class ChatCreateSerializer(serializers.Serializer):
    """Open a chat with its first message.

    Clients may only link their own orders and quotes.
    """

    type = serializers.ChoiceField(choices=Chat.Type.choices)
    subject = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    message = serializers.CharField(min_length=1, max_length=2000)
    priority = serializers.ChoiceField(choices=Chat.Priority.choices, required=False,
                                       default=Chat.Priority.MEDIUM)
    related_order = serializers.IntegerField(required=False, allow_null=True)
    related_quote = serializers.IntegerField(required=False, allow_null=True)

    def _owned(self, model, pk):
        user = self.context["request"].user
        qs = model.objects.all() if is_admin(user) else model.objects.filter(client=user)
        obj = qs.filter(pk=pk).first()
        if obj is None:
            raise serializers.ValidationError("Not found.")
        return obj

    def validate_related_order(self, value):
        return None if value is None else self._owned(Order, value)

    def validate_related_quote(self, value):
        return None if value is None else self._owned(Quote, value)

    @transaction.atomic
    def create(self, validated_data):
        user = self.context["request"].user
        chat = Chat.objects.create(
            type=validated_data["type"],
            subject=validated_data.get("subject", ""),
            priority=validated_data["priority"],
            related_order=validated_data.get("related_order"),
            related_quote=validated_data.get("related_quote"),
            created_by=user,
        )
        ChatParticipant.objects.create(chat=chat, user=user, role=get_role(user))
        ChatMessage.objects.create(chat=chat, sender=user, content=validated_data["message"])
        return chat


class ChatMessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(min_length=1, max_length=2000)
