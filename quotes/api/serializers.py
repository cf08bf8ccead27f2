"""Quotes API serializers."""

from rest_framework import serializers

from common.api.serializers import CommunicationEntrySerializer
from common.exceptions import InvalidState
from profiles.api.permissions import is_admin
from quotes.models import Quote
from services.api.serializers import ServiceSummarySerializer
from services.models import Service


class QuoteCreateSerializer(serializers.Serializer):
    """Input serializer for requesting a quote.

    Validates:
    - service_id exists and is active
    - the service is quote-priced (fixed/hourly services are ordered directly)
    """

    service_id = serializers.IntegerField()
    custom_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=1)
    requirements = serializers.CharField(min_length=10, max_length=5000)
    timeline = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    contact_preference = serializers.ChoiceField(choices=Quote.ContactPreference.choices)
    additional_notes = serializers.CharField(
        max_length=1000, required=False, allow_blank=True, default=""
    )
    priority = serializers.ChoiceField(choices=Quote.Priority.choices, required=False,
                                       default=Quote.Priority.MEDIUM)

    def validate_service_id(self, value):
        try:
            service = Service.objects.get(id=value, is_active=True)
        except Service.DoesNotExist:
            raise serializers.ValidationError("Service not found.")
        self.context["service_obj"] = service
        return value

    def validate(self, attrs):
        if not self.context["service_obj"].requires_quote:
            raise InvalidState(
                "This service does not require a quote. Please place a regular order instead."
            )
        return attrs


class QuoteListSerializer(serializers.ModelSerializer):
    service = ServiceSummarySerializer(read_only=True)
    converted_order = serializers.SerializerMethodField()

    class Meta:
        model = Quote
        fields = [
            "id",
            "quote_number",
            "client",
            "service",
            "custom_amount",
            "quoted_amount",
            "requirements",
            "timeline",
            "contact_preference",
            "additional_notes",
            "priority",
            "status",
            "expires_at",
            "admin_response",
            "responded_by",
            "responded_at",
            "converted_order",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_converted_order(self, obj):
        order = getattr(obj, "converted_order", None)
        return order.id if order else None


class QuoteSerializer(QuoteListSerializer):
    """Detail serializer including the communication log."""

    communication = serializers.SerializerMethodField()

    class Meta(QuoteListSerializer.Meta):
        fields = QuoteListSerializer.Meta.fields + ["communication"]
        read_only_fields = fields

    def get_communication(self, obj):
        entries = obj.communication.select_related("author")
        request = self.context.get("request")
        if not request or not is_admin(request.user):
            entries = entries.filter(is_internal=False)
        return CommunicationEntrySerializer(entries, many=True).data


class QuoteRespondSerializer(serializers.Serializer):
    quoted_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    response = serializers.CharField(min_length=1, max_length=2000)
    status = serializers.ChoiceField(choices=[Quote.Status.ACCEPTED, Quote.Status.REJECTED])
