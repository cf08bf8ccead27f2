"""Services API serializers.

Provide serializers for reading catalog entries (with nested `pricing` and
`rating` blocks), creating/updating services as an admin, and the detail
representation that includes related services.
"""

from rest_framework import serializers

from ..models import Service


# --------------------------- helpers (pure functions) ---------------------------

def _normalize_feature(item):
    if isinstance(item, str):
        name = item.strip()
        if not name:
            raise serializers.ValidationError("Feature names must not be empty.")
        return {"name": name, "description": "", "included": True}
    if not isinstance(item, dict) or not str(item.get("name", "")).strip():
        raise serializers.ValidationError(
            "Each feature must be a string or an object with a 'name'."
        )
    return {
        "name": str(item["name"]).strip(),
        "description": str(item.get("description") or ""),
        "included": bool(item.get("included", True)),
    }


def _ensure_str_list(value):
    if not isinstance(value, list):
        raise serializers.ValidationError("Must be an array of strings.")
    if any(not isinstance(x, str) for x in value):
        raise serializers.ValidationError("All entries must be strings.")
    return [x.strip() for x in value if x.strip()]


# --------------------------------- serializers ---------------------------------

class PricingSerializer(serializers.Serializer):
    """Nested view of the flat pricing_* columns."""

    type = serializers.ChoiceField(source="pricing_type", choices=Service.PricingType.choices)
    amount = serializers.DecimalField(
        source="pricing_amount",
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
    )
    currency = serializers.CharField(source="pricing_currency", max_length=3, required=False)
    billing_cycle = serializers.ChoiceField(
        choices=Service.BillingCycle.choices, required=False
    )


class RatingSerializer(serializers.Serializer):
    average = serializers.DecimalField(source="rating_average", max_digits=3, decimal_places=2, read_only=True)
    count = serializers.IntegerField(source="rating_count", read_only=True)


class ServiceSerializer(serializers.ModelSerializer):
    """Read serializer for catalog entries."""

    pricing = PricingSerializer(source="*", read_only=True)
    rating = RatingSerializer(source="*", read_only=True)

    class Meta:
        model = Service
        fields = [
            "id",
            "title",
            "description",
            "category",
            "pricing",
            "features",
            "technologies",
            "tags",
            "delivery_time",
            "difficulty",
            "is_active",
            "is_featured",
            "rating",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ServiceSummarySerializer(serializers.ModelSerializer):
    """Compact representation embedded in orders, quotes and related lists."""

    pricing = PricingSerializer(source="*", read_only=True)

    class Meta:
        model = Service
        fields = ["id", "title", "category", "pricing", "delivery_time"]
        read_only_fields = fields


class ServiceDetailSerializer(ServiceSerializer):
    """Detail serializer adding up to four active services of the same category."""

    related_services = serializers.SerializerMethodField()

    class Meta(ServiceSerializer.Meta):
        fields = ServiceSerializer.Meta.fields + ["related_services"]
        read_only_fields = fields

    def get_related_services(self, obj):
        qs = (
            Service.objects.filter(category=obj.category, is_active=True)
            .exclude(pk=obj.pk)
            .order_by("-is_featured", "-created_at")[:4]
        )
        return ServiceSummarySerializer(qs, many=True).data


class ServiceWriteSerializer(serializers.ModelSerializer):
    """Admin create/patch serializer.

    Notes:
    - The creator is taken from request.user (context) and never from payload.
    - Features accept plain strings or `{name, description, included}` objects.
    """

    title = serializers.CharField(min_length=5, max_length=200)
    description = serializers.CharField(min_length=20, max_length=2000)
    pricing = PricingSerializer(source="*")
    delivery_time = serializers.CharField(max_length=100, allow_blank=False)
    features = serializers.JSONField()
    technologies = serializers.JSONField(required=False)
    tags = serializers.JSONField(required=False)

    class Meta:
        model = Service
        fields = [
            "title",
            "description",
            "category",
            "pricing",
            "features",
            "technologies",
            "tags",
            "delivery_time",
            "difficulty",
            "is_active",
            "is_featured",
        ]

    def validate_features(self, value):
        if not isinstance(value, list) or len(value) < 1:
            raise serializers.ValidationError("At least one feature is required.")
        return [_normalize_feature(item) for item in value]

    def validate_technologies(self, value):
        return _ensure_str_list(value)

    def validate_tags(self, value):
        return [t.lower() for t in _ensure_str_list(value)]

    def create(self, validated_data):
        validated_data["created_by"] = self.context["request"].user
        return super().create(validated_data)
