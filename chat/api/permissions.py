from rest_framework.permissions import BasePermission

from profiles.api.permissions import is_admin


class IsChatParticipantOrAdmin(BasePermission):
    """Object-level: chat participants and admins."""

    message = "You are not a participant of this chat."

    def has_object_permission(self, request, view, obj):
        user = request.user
        if not user.is_authenticated:
            return False
        return is_admin(user) or obj.participants.filter(user=user).exists()
