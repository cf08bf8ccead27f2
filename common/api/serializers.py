"""Common API serializers.

Serializers for the append-only communication log shared by orders and
quotes.
"""

from rest_framework import serializers


class CommunicationEntrySerializer(serializers.Serializer):
    """Read representation of one communication entry."""

    id = serializers.IntegerField(read_only=True)
    author = serializers.IntegerField(source="author_id", read_only=True)
    author_name = serializers.SerializerMethodField()
    message = serializers.CharField(read_only=True)
    is_internal = serializers.BooleanField(read_only=True)
    timestamp = serializers.DateTimeField(read_only=True)

    def get_author_name(self, obj):
        user = obj.author
        full = f"{user.first_name} {user.last_name}".strip()
        return full or user.username


class CommunicationCreateSerializer(serializers.Serializer):
    """Input for appending a message; the author always comes from the request."""

    message = serializers.CharField(min_length=1, max_length=2000, trim_whitespace=True)
    is_internal = serializers.BooleanField(required=False, default=False)
