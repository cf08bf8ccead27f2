"""Auth API views.

Implements token-based registration and login. Registration also creates the
client Profile carrying company and phone.
"""

import logging

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.response import Response
from rest_framework.views import APIView

from profiles.models import Profile
from profiles.api.permissions import get_role
from .permissions import AllowAnyRegistration, AllowedAnyLogin
from .serializers import LoginSerializer, RegistrationSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


def _token_payload(user, token):
    return {
        "token": token.key,
        "username": user.username,
        "email": user.email,
        "user_id": user.id,
        "role": get_role(user),
    }


class RegistrationView(APIView):
    """POST /api/v1/registration/ -> create client user + profile, return auth token."""

    authentication_classes = []
    permission_classes = [AllowAnyRegistration]

    def post(self, request, *args, **kwargs):
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.save()
        Profile.objects.get_or_create(
            user=user,
            defaults={
                "role": Profile.Role.CLIENT,
                "company": serializer.validated_data.get("company", ""),
                "phone": serializer.validated_data.get("phone", ""),
            },
        )
        logger.info("Registered client user %s", user.id)

        token, _ = Token.objects.get_or_create(user=user)
        return Response(_token_payload(user, token), status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """POST /api/v1/login/ -> validate credentials and return auth token."""

    authentication_classes = []
    permission_classes = [AllowedAnyLogin]

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data["user"]
        token, _ = Token.objects.get_or_create(user=user)
        return Response(_token_payload(user, token), status=status.HTTP_200_OK)
