from rest_framework.permissions import BasePermission

from profiles.api.permissions import is_admin


class IsQuoteClient(BasePermission):
    """Object-level: only the client who requested the quote."""

    message = "Access denied."

    def has_object_permission(self, request, view, obj):
        return request.user.is_authenticated and obj.client_id == request.user.id


class IsQuoteClientOrAdmin(BasePermission):
    """Object-level: the requesting client or any admin."""

    message = "Access denied."

    def has_object_permission(self, request, view, obj):
        user = request.user
        return user.is_authenticated and (is_admin(user) or obj.client_id == user.id)
