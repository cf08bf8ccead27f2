from django.contrib import admin
from .models import Service


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    """
    Catalog management:
    - search by title, description and creator
    - filter by category, pricing type and flags
    - rating aggregate is read-only
    """
    list_display = (
        "id",
        "title",
        "category",
        "pricing_type",
        "price_display",
        "is_active",
        "is_featured",
        "updated_at",
    )
    list_select_related = ("created_by",)
    search_fields = ("title", "description", "created_by__username")
    list_filter = ("category", "pricing_type", "is_active", "is_featured")
    date_hierarchy = "created_at"
    ordering = ("-updated_at", "-id")
    readonly_fields = ("created_at", "updated_at", "rating_average", "rating_count")
    autocomplete_fields = ("created_by",)

    def price_display(self, obj):
        if obj.pricing_amount is None:
            return "-"
        return f"{obj.pricing_amount:.2f} {obj.pricing_currency}"
    price_display.short_description = "price"
    price_display.admin_order_field = "pricing_amount"
