"""Profiles API permissions.

Role helpers and permission classes shared by every app. A user's role comes
from `Profile.role`; Django staff and superusers always count as admins.
"""

from rest_framework.permissions import BasePermission, SAFE_METHODS

from ..models import Profile


def get_role(user) -> str:
    """Return "admin", "client" or "" for the given (possibly anonymous) user."""
    if not user or not user.is_authenticated:
        return ""
    if user.is_staff or user.is_superuser:
        return Profile.Role.ADMIN
    prof = getattr(user, "profile", None)
    return getattr(prof, "role", "") if prof else ""


def is_admin(user) -> bool:
    return get_role(user) == Profile.Role.ADMIN


def is_client(user) -> bool:
    return get_role(user) == Profile.Role.CLIENT


class IsClientUser(BasePermission):
    """Allows access only to authenticated users with role 'client'.

    Used on the endpoints where a client acts on their own behalf (placing
    orders, requesting quotes, paying).
    """

    message = "Only client users may perform this action."

    def has_permission(self, request, view):
        return is_client(request.user)


class IsAdminRole(BasePermission):
    """Allows access only to admins (profile role 'admin' or staff users)."""

    message = "Only admin users may perform this action."

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsProfileOwner(BasePermission):
    """
    Object-level permission that allows write access only to the profile owner.

    - SAFE methods (GET/HEAD/OPTIONS) are always allowed.
    - For write methods (e.g., PATCH), the user must match the profile's owner.
    """

    message = "You may only modify your own profile."

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        return request.user.is_authenticated and obj.user_id == request.user.id
