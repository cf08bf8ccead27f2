"""Profiles API serializers.

Contains serializers for reading the caller's profile and partially updating
it. Role is read-only here: clients come from registration and admins from
the `create_admin` management command. String fields never return `null`.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers
from ..models import Profile

User = get_user_model()


# ------------------------------ helpers ------------------------------

def _apply_user_updates(user, data: dict):
    for attr, val in data.items():
        setattr(user, attr, val if val is not None else "")
    if data:
        user.save(update_fields=list(data.keys()))


def _coalesce_fields(data: dict, keys: set):
    for k in keys:
        if data.get(k) is None:
            data[k] = ""


# ------------------------------ serializers ------------------------------

class ProfileSerializer(serializers.ModelSerializer):
    """Read serializer (coalesces selected string fields to '')."""

    username = serializers.CharField(source="user.username", read_only=True)
    first_name = serializers.CharField(source="user.first_name", read_only=True)
    last_name = serializers.CharField(source="user.last_name", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = Profile
        fields = [
            "user",
            "username",
            "first_name",
            "last_name",
            "email",
            "role",
            "company",
            "phone",
            "avatar",
            "created_at",
        ]
        read_only_fields = fields

    _no_null = {"first_name", "last_name", "email", "company", "phone", "avatar"}

    def to_representation(self, instance: Profile):
        data = super().to_representation(instance)
        _coalesce_fields(data, self._no_null)
        return data


class ProfilePatchSerializer(serializers.ModelSerializer):
    """Partial update of the caller's own profile and user name/email fields."""

    first_name = serializers.CharField(
        source="user.first_name", required=False, allow_blank=True, allow_null=True, max_length=150
    )
    last_name = serializers.CharField(
        source="user.last_name", required=False, allow_blank=True, allow_null=True, max_length=150
    )
    email = serializers.EmailField(
        source="user.email", required=False, allow_blank=True, allow_null=True
    )

    class Meta:
        model = Profile
        fields = ["first_name", "last_name", "email", "company", "phone", "avatar"]
        extra_kwargs = {
            "company": {"required": False, "allow_blank": True},
            "phone": {"required": False, "allow_blank": True},
            "avatar": {"required": False, "allow_blank": True},
        }

    def validate_email(self, value):
        request = self.context.get("request")
        if value and User.objects.filter(email__iexact=value).exclude(pk=request.user.pk).exists():
            raise serializers.ValidationError("Email already in use.")
        return value

    def update(self, instance: Profile, validated_data):
        """Handle nested user fields and normalize None -> ''."""
        _apply_user_updates(instance.user, validated_data.pop("user", {}))
        for attr, val in validated_data.items():
            setattr(instance, attr, val if val is not None else "")
        instance.save()
        return instance
