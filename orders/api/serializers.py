"""Orders API serializers.

Input serializers for placing orders and for the admin actions (approve,
reject, status override, assignment), and output serializers that nest the
pricing and payment sub-records, the service and, on detail views, the
communication log. Clients never see internal communication entries.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from common.api.serializers import CommunicationEntrySerializer
from common.exceptions import InvalidState
from orders.models import Order
from profiles.api.permissions import is_admin
from services.api.serializers import ServiceSummarySerializer
from services.models import Service

User = get_user_model()


class OrderCreateSerializer(serializers.Serializer):
    """Input serializer for placing an order against a catalog service.

    Validates:
    - service_id exists and is active (404-like validation error if not)
    - the service is not quote-priced (those go through the quote flow)
    """

    service_id = serializers.IntegerField(required=True)
    quantity = serializers.IntegerField(min_value=1)
    requirements = serializers.CharField(min_length=10, max_length=5000)
    timeline = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    contact_preference = serializers.ChoiceField(choices=Order.ContactPreference.choices)
    additional_notes = serializers.CharField(
        max_length=1000, required=False, allow_blank=True, default=""
    )

    def validate_service_id(self, value):
        """Ensure the Service exists and store it in the serializer context."""
        try:
            service = Service.objects.get(id=value, is_active=True)
        except Service.DoesNotExist:
            raise serializers.ValidationError("Service not found.")
        self.context["service_obj"] = service
        return value

    def validate(self, attrs):
        service = self.context["service_obj"]
        if service.requires_quote:
            raise InvalidState(
                "This service requires a quote. Please submit a quote request instead."
            )
        return attrs


class OrderPricingSerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(source="pricing_subtotal", max_digits=12, decimal_places=2)
    tax = serializers.DecimalField(source="pricing_tax", max_digits=12, decimal_places=2)
    total = serializers.DecimalField(source="pricing_total", max_digits=12, decimal_places=2)
    currency = serializers.CharField(source="pricing_currency")


class OrderPaymentSerializer(serializers.Serializer):
    status = serializers.CharField(source="payment_status")
    method = serializers.CharField(source="payment_method")
    transaction_id = serializers.CharField(source="payment_transaction_id")
    payment_intent_id = serializers.CharField()
    paid_at = serializers.DateTimeField()


class OrderListSerializer(serializers.ModelSerializer):
    """Read serializer for order lists (no communication log)."""

    service = ServiceSummarySerializer(read_only=True)
    pricing = OrderPricingSerializer(source="*", read_only=True)
    payment = OrderPaymentSerializer(source="*", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "client",
            "service",
            "assigned_to",
            "quantity",
            "total_amount",
            "pricing",
            "requirements",
            "timeline",
            "contact_preference",
            "additional_notes",
            "status",
            "payment",
            "approved_by",
            "approved_at",
            "admin_notes",
            "rejected_by",
            "rejected_at",
            "rejection_reason",
            "source_quote",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderSerializer(OrderListSerializer):
    """Detail serializer including the communication log."""

    communication = serializers.SerializerMethodField()

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + ["communication"]
        read_only_fields = fields

    def get_communication(self, obj):
        entries = obj.communication.select_related("author")
        request = self.context.get("request")
        if not request or not is_admin(request.user):
            entries = entries.filter(is_internal=False)
        return CommunicationEntrySerializer(entries, many=True).data


class OrderApproveSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")


class OrderRejectSerializer(serializers.Serializer):
    rejection_reason = serializers.CharField(min_length=10, max_length=500)


class OrderStatusSerializer(serializers.Serializer):
    """Admin override: any of the nine statuses, optional notes."""

    status = serializers.ChoiceField(choices=Order.Status.choices)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")


class OrderAssignSerializer(serializers.Serializer):
    assigned_to = serializers.IntegerField()

    def validate_assigned_to(self, value):
        """Orders can only be assigned to admin/staff users."""
        try:
            user = User.objects.get(id=value)
        except User.DoesNotExist:
            raise serializers.ValidationError("User not found.")
        if not is_admin(user):
            raise serializers.ValidationError("Orders can only be assigned to admin users.")
        self.context["assignee_obj"] = user
        return value
