from django.contrib import admin
from .models import Quote, QuoteCommunication


class QuoteCommunicationInline(admin.TabularInline):
    model = QuoteCommunication
    extra = 0
    can_delete = False
    fields = ("timestamp", "author", "is_internal", "message")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    """
    Quote requests:
    - list: number, status, priority, client, service, budget vs. quoted amount
    - filter: status, priority
    - responses go through the API so the log stays consistent
    """
    list_display = (
        "quote_number",
        "status",
        "priority",
        "client",
        "service",
        "custom_amount",
        "quoted_amount",
        "expires_at",
        "created_at",
    )
    list_select_related = ("client", "service")
    list_filter = ("status", "priority", "created_at")
    date_hierarchy = "created_at"
    ordering = ("-created_at", "-id")
    search_fields = ("quote_number", "client__username", "service__title")
    inlines = [QuoteCommunicationInline]
    readonly_fields = (
        "quote_number",
        "client",
        "service",
        "status",
        "custom_amount",
        "quoted_amount",
        "admin_response",
        "responded_by",
        "responded_at",
        "expires_at",
        "created_at",
        "updated_at",
    )
