"""Chat app models.

A Chat is a conversation between a client and the support team, optionally
tied to an order or a quote. Messages are append-only.
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models

from orders.models import Order
from quotes.models import Quote


class Chat(models.Model):
    class Type(models.TextChoices):
        SUPPORT = "support", "support"
        ORDER = "order", "order"
        QUOTE = "quote", "quote"
        GENERAL = "general", "general"

    class Status(models.TextChoices):
        ACTIVE = "active", "active"
        CLOSED = "closed", "closed"
        ARCHIVED = "archived", "archived"

    class Priority(models.TextChoices):
        LOW = "low", "low"
        MEDIUM = "medium", "medium"
        HIGH = "high", "high"
        URGENT = "urgent", "urgent"

    type = models.CharField(max_length=10, choices=Type.choices)
    subject = models.CharField(max_length=200, blank=True, default="")
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    related_order = models.ForeignKey(
        Order, on_delete=models.SET_NULL, related_name="chats", null=True, blank=True
    )
    related_quote = models.ForeignKey(
        Quote, on_delete=models.SET_NULL, related_name="chats", null=True, blank=True
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="chats_started"
    )
    last_activity = models.DateTimeField(auto_now_add=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-last_activity", "-id")

    def __str__(self) -> str:
        return f"Chat<{self.id} {self.type} {self.status}>"


class ChatParticipant(models.Model):
    chat = models.ForeignKey(Chat, on_delete=models.CASCADE, related_name="participants")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="chat_memberships"
    )
    role = models.CharField(max_length=10)
    joined_at = models.DateTimeField(auto_now_add=True)
    last_seen = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("joined_at", "id")
        constraints = [
            models.UniqueConstraint(fields=["chat", "user"], name="unique_chat_participant"),
        ]


class ChatMessage(models.Model):
    class MessageType(models.TextChoices):
        TEXT = "text", "text"
        SYSTEM = "system", "system"

    chat = models.ForeignKey(Chat, on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="+")
    content = models.TextField(max_length=2000, validators=[MinLengthValidator(1)])
    message_type = models.CharField(
        max_length=10, choices=MessageType.choices, default=MessageType.TEXT
    )
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("timestamp", "id")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Chat messages are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Chat messages are append-only.")
