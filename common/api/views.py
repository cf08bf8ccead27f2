import time

from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

_STARTED_AT = time.monotonic()


class HealthCheckAPIView(APIView):
    """
    GET /api/v1/health/

    Liveness probe: returns status "OK", the server time and process uptime
    in seconds.

    Authentication: none
    Permissions: AllowAny
    """

    authentication_classes = []          # No authentication required
    permission_classes = [AllowAny]
    throttle_classes = []

    def get(self, request):
        data = {
            "status": "OK",
            "timestamp": timezone.now().isoformat(),
            "uptime": round(time.monotonic() - _STARTED_AT, 3),
        }
        return Response(data, status=status.HTTP_200_OK)
