from django.contrib.auth import get_user_model
from rest_framework import serializers

from orders.models import Order

User = get_user_model()


class RecentOrderSerializer(serializers.ModelSerializer):
    client_name = serializers.SerializerMethodField()
    service_title = serializers.CharField(source="service.title", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "client",
            "client_name",
            "service",
            "service_title",
            "status",
            "total_amount",
            "created_at",
        ]

    def get_client_name(self, obj):
        full = f"{obj.client.first_name} {obj.client.last_name}".strip()
        return full or obj.client.username


class ClientUserSerializer(serializers.ModelSerializer):
    """Client account as seen by admins; never exposes the password hash."""

    company = serializers.SerializerMethodField()
    phone = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "company",
            "phone",
            "is_active",
            "date_joined",
            "last_login",
        ]

    def get_company(self, obj):
        return obj.profile.company or ""

    def get_phone(self, obj):
        return obj.profile.phone or ""
