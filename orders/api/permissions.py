"""Orders API permissions.

Contains object-level permission classes used by the orders endpoints. Role
checks (client/admin) come from `profiles.api.permissions`.
"""

from rest_framework.permissions import BasePermission

from profiles.api.permissions import is_admin


class IsOrderClientOrAdmin(BasePermission):
    """Allows access to an order only for its client or an admin.

    Requirements:
    - user is authenticated
    - user is an admin, or the client who placed the order
    """

    message = "You do not have access to this order."

    def has_object_permission(self, request, view, obj):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return is_admin(user) or obj.client_id == user.id
