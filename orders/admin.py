from django.contrib import admin
from django.utils.html import format_html
from .models import Order, OrderCommunication


class OrderCommunicationInline(admin.TabularInline):
    """Read-only view of the log; entries are append-only."""
    model = OrderCommunication
    extra = 0
    can_delete = False
    fields = ("timestamp", "author", "is_internal", "message")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Order overview:
    - list: number, status (badge), client, service, total, payment status
    - filter: status, payment status, created (date hierarchy)
    - search: order number, client username, service title
    - pricing and payment fields are read-only; status changes go through the API
    """
    list_display = (
        "order_number",
        "status_badge",
        "client_username",
        "service",
        "total_amount",
        "payment_status",
        "assigned_to",
        "created_at",
    )
    list_select_related = ("client", "service", "assigned_to")
    list_filter = ("status", "payment_status", "created_at")
    date_hierarchy = "created_at"
    ordering = ("-created_at", "-id")
    search_fields = ("order_number", "client__username", "service__title")
    inlines = [OrderCommunicationInline]

    readonly_fields = (
        "order_number",
        "client",
        "service",
        "source_quote",
        "status",
        "quantity",
        "total_amount",
        "pricing_subtotal",
        "pricing_tax",
        "pricing_total",
        "pricing_currency",
        "approved_by",
        "approved_at",
        "rejected_by",
        "rejected_at",
        "rejection_reason",
        "payment_status",
        "payment_method",
        "payment_transaction_id",
        "payment_intent_id",
        "paid_at",
        "created_at",
        "updated_at",
    )

    def status_badge(self, obj):
        color = {
            "pending": "#9ca3af",
            "payment_confirmed": "#6366f1",
            "approved": "#0ea5e9",
            "in_progress": "#0ea5e9",
            "under_review": "#f59e0b",
            "completed": "#22c55e",
            "rejected": "#ef4444",
            "cancelled": "#ef4444",
            "refunded": "#a855f7",
        }.get(obj.status, "#9ca3af")
        return format_html(
            '<span style="display:inline-block;padding:2px 8px;border-radius:999px;'
            'font-size:12px;font-weight:600;color:#fff;background:{};">{}</span>',
            color,
            obj.status,
        )
    status_badge.short_description = "status"
    status_badge.admin_order_field = "status"

    def client_username(self, obj):
        return obj.client.username if obj.client_id else ""
    client_username.short_description = "client"
