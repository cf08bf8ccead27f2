from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

User = get_user_model()

# Replace the stock registration so the role column is available.
try:
    admin.site.unregister(User)
except admin.sites.NotRegistered:
    pass


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    """
    User list including id, portal role (Profile.role) and admin flags.
    """
    list_display = (
        "id",
        "username",
        "email",
        "role_display",
        "company_display",
        "is_staff",
        "is_active",
        "date_joined",
        "last_login",
    )
    list_select_related = ("profile",)
    ordering = ("-date_joined", "-id")
    search_fields = ("username", "email", "first_name", "last_name", "profile__company")
    list_filter = ("is_staff", "is_superuser", "is_active", "profile__role")

    def role_display(self, obj):
        prof = getattr(obj, "profile", None)
        return getattr(prof, "role", "") or ""
    role_display.short_description = "role"
    role_display.admin_order_field = "profile__role"

    def company_display(self, obj):
        prof = getattr(obj, "profile", None)
        return getattr(prof, "company", "") or ""
    company_display.short_description = "company"
