"""Profiles API views.

Provides the endpoint for the authenticated user to read and update their own
profile. The owner is inferred from the request and never taken from the
payload.
"""

from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Profile
from .permissions import IsProfileOwner
from .serializers import ProfilePatchSerializer, ProfileSerializer


class OwnProfileView(generics.RetrieveUpdateAPIView):
    """
    GET `/api/v1/profile/` returns the caller's profile.
    PATCH `/api/v1/profile/` updates only the fields provided.

    If the profile does not exist yet it is lazily created with role 'client'.
    """

    permission_classes = [IsAuthenticated, IsProfileOwner]
    http_method_names = ["get", "patch", "head", "options"]

    def get_serializer_class(self):
        """Use the patch serializer for PATCH; the read serializer otherwise."""
        if self.request.method == "PATCH":
            return ProfilePatchSerializer
        return ProfileSerializer

    def get_object(self):
        obj, _ = Profile.objects.select_related("user").get_or_create(user=self.request.user)
        self.check_object_permissions(self.request, obj)
        return obj

    def partial_update(self, request, *args, **kwargs):
        """Apply the patch and return the full profile representation."""
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(ProfileSerializer(instance).data, status=status.HTTP_200_OK)
