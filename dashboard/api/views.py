"""Admin dashboard views: portal-wide counters and the client directory."""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.models import Chat
from common.pagination import UsersPagination
from orders.models import Order
from profiles.api.permissions import IsAdminRole
from profiles.models import Profile
from quotes.models import Quote
from services.models import Service
from .serializers import ClientUserSerializer, RecentOrderSerializer

User = get_user_model()

RECENT_ORDER_STATUSES = (Order.Status.PAYMENT_CONFIRMED, Order.Status.IN_PROGRESS)


def _month_start():
    now = timezone.localtime()
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _monthly_revenue():
    total = Order.objects.filter(
        payment_status=Order.PaymentStatus.COMPLETED,
        created_at__gte=_month_start(),
    ).aggregate(
        total=Coalesce(
            Sum("pricing_total"),
            Value(Decimal("0")),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    )["total"]
    return total.quantize(Decimal("0.01"))


class DashboardAPIView(APIView):
    """GET /api/v1/admin/dashboard/ -> {stats, recent_orders}."""

    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request):
        clients = User.objects.filter(profile__role=Profile.Role.CLIENT, is_staff=False, is_superuser=False)
        recent = (
            Order.objects.filter(status__in=RECENT_ORDER_STATUSES)
            .select_related("client", "service")
            .order_by("-created_at", "-id")[:10]
        )
        stats = {
            "total_users": clients.count(),
            "total_services": Service.objects.filter(is_active=True).count(),
            "total_orders": Order.objects.count(),
            "total_quotes": Quote.objects.count(),
            "pending_quotes": Quote.objects.filter(status=Quote.Status.PENDING).count(),
            "active_chats": Chat.objects.filter(status=Chat.Status.ACTIVE).count(),
            "monthly_revenue": str(_monthly_revenue()),
        }
        return Response(
            {"stats": stats, "recent_orders": RecentOrderSerializer(recent, many=True).data},
            status=status.HTTP_200_OK,
        )


class ClientUserListAPIView(generics.ListAPIView):
    """GET /api/v1/admin/users/?search=&page=&limit= -> paginated client accounts."""

    serializer_class = ClientUserSerializer
    permission_classes = [IsAuthenticated, IsAdminRole]
    pagination_class = UsersPagination

    def get_queryset(self):
        qs = (
            User.objects.filter(profile__role=Profile.Role.CLIENT, is_staff=False, is_superuser=False)
            .select_related("profile")
            .order_by("-date_joined", "-id")
        )
        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(email__icontains=search)
                | Q(profile__company__icontains=search)
            )
        return qs
