from django.contrib import admin
from .models import Chat, ChatMessage, ChatParticipant


class ChatParticipantInline(admin.TabularInline):
    model = ChatParticipant
    extra = 0
    readonly_fields = ("joined_at", "last_seen")


class ChatMessageInline(admin.TabularInline):
    model = ChatMessage
    extra = 0
    can_delete = False
    fields = ("timestamp", "sender", "message_type", "content")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    """Support conversations; status and priority can be changed here."""
    list_display = ("id", "type", "subject", "status", "priority", "created_by", "last_activity")
    list_select_related = ("created_by",)
    list_filter = ("type", "status", "priority")
    search_fields = ("subject", "created_by__username")
    ordering = ("-last_activity", "-id")
    readonly_fields = ("created_by", "related_order", "related_quote", "last_activity", "created_at", "updated_at")
    inlines = [ChatParticipantInline, ChatMessageInline]
