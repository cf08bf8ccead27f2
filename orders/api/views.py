"""Orders API views.

Clients place orders and see only their own; admins see every order and drive
it through the lifecycle (approve, reject, status override, assignment).
Both parties may append to an order's communication log. State changes go
through `orders.lifecycle`.
"""

import logging

from rest_framework import generics, status
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.api.lookups import parse_pk
from common.api.serializers import CommunicationCreateSerializer, CommunicationEntrySerializer
from common.pagination import PortalPagination
from orders import lifecycle
from orders.models import Order
from profiles.api.permissions import IsAdminRole, IsClientUser, is_admin
from .permissions import IsOrderClientOrAdmin
from .serializers import (
    OrderApproveSerializer,
    OrderAssignSerializer,
    OrderCreateSerializer,
    OrderListSerializer,
    OrderRejectSerializer,
    OrderSerializer,
    OrderStatusSerializer,
)

logger = logging.getLogger(__name__)


# ----------------------------- helpers (module-level) -----------------------------

def _visible_orders(user):
    """Admins see every order, clients only the ones they placed."""
    if not user or not user.is_authenticated:
        return Order.objects.none()
    qs = Order.objects.select_related("service", "client")
    if is_admin(user):
        return qs
    return qs.filter(client=user)


def _map_service_not_found(exc: ValidationError):
    """Raise 404 when service_id validation reports a missing service."""
    detail = exc.detail
    if isinstance(detail, dict) and "service_id" in detail:
        msgs = detail["service_id"]
        if not isinstance(msgs, (list, tuple)):
            msgs = [msgs]
        if any("not found" in str(m).lower() for m in msgs):
            raise NotFound("Service not found.")


def _get_order(pk, user) -> Order:
    """Fetch an order visible to `user`; 404 if it does not exist for them."""
    order_id = parse_pk(pk, "order_id")
    order = _visible_orders(user).filter(pk=order_id).first()
    if order is None:
        raise NotFound("Order not found.")
    if not is_admin(user) and order.client_id != user.id:
        # Backstop for the query-level scoping above.
        logger.error("Order %s leaked past client scoping for user %s", order.pk, user.id)
        raise NotFound("Order not found.")
    return order


def _order_response(order, request, code=status.HTTP_200_OK):
    return Response(OrderSerializer(order, context={"request": request}).data, status=code)


# --------------------------------------- views ---------------------------------------

class OrderListCreateAPIView(generics.ListCreateAPIView):
    """GET: paginated orders visible to the caller, optional ?status= filter.
    POST: place an order for a fixed- or hourly-priced service (client-only).
    """

    pagination_class = PortalPagination

    def get_permissions(self):
        """Client-only on POST, otherwise just authenticated."""
        if self.request.method == "POST":
            return [IsAuthenticated(), IsClientUser()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        return OrderListSerializer if self.request.method == "GET" else OrderCreateSerializer

    def get_queryset(self):
        qs = _visible_orders(self.request.user)
        status_filter = self.request.query_params.get("status")
        if status_filter:
            if status_filter not in Order.Status.values:
                raise ValidationError({"status": "Unknown order status."})
            qs = qs.filter(status=status_filter)
        return qs.order_by("-created_at", "-id")

    def create(self, request, *args, **kwargs):
        """Validate the request and create a pending order."""
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except ValidationError as exc:
            _map_service_not_found(exc)
            raise
        data = serializer.validated_data
        order = lifecycle.create_order(
            request.user,
            serializer.context["service_obj"],
            quantity=data["quantity"],
            requirements=data["requirements"],
            contact_preference=data["contact_preference"],
            timeline=data.get("timeline", ""),
            additional_notes=data.get("additional_notes", ""),
        )
        return _order_response(order, request, status.HTTP_201_CREATED)


class OrderDetailAPIView(APIView):
    """GET /api/v1/orders/{id}/ -> full order incl. communication log."""

    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        return _order_response(_get_order(pk, request.user), request)


class OrderApproveAPIView(APIView):
    """PUT /api/v1/orders/{id}/approve/ -> payment_confirmed to approved (admin)."""

    permission_classes = [IsAuthenticated, IsAdminRole]

    def put(self, request, pk):
        serializer = OrderApproveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _get_order(pk, request.user)
        lifecycle.approve(order, request.user, serializer.validated_data["admin_notes"])
        return _order_response(order, request)


class OrderRejectAPIView(APIView):
    """PUT /api/v1/orders/{id}/reject/ -> rejected, with a mandatory reason (admin)."""

    permission_classes = [IsAuthenticated, IsAdminRole]

    def put(self, request, pk):
        serializer = OrderRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _get_order(pk, request.user)
        lifecycle.reject(order, request.user, serializer.validated_data["rejection_reason"])
        return _order_response(order, request)


class OrderStatusAPIView(APIView):
    """PUT /api/v1/orders/{id}/status/ -> set any status (admin override)."""

    permission_classes = [IsAuthenticated, IsAdminRole]

    def put(self, request, pk):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _get_order(pk, request.user)
        data = serializer.validated_data
        lifecycle.set_status(order, request.user, data["status"], data["notes"])
        return _order_response(order, request)


class OrderAssignAPIView(APIView):
    """PUT /api/v1/orders/{id}/assign/ -> assign the order to an admin user."""

    permission_classes = [IsAuthenticated, IsAdminRole]

    def put(self, request, pk):
        serializer = OrderAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _get_order(pk, request.user)
        lifecycle.assign(order, serializer.context["assignee_obj"], request.user)
        return _order_response(order, request)


class OrderCommunicationAPIView(APIView):
    """POST /api/v1/orders/{id}/communication/ -> append a message.

    Clients may only write to their own orders and never internal notes.
    """

    permission_classes = [IsAuthenticated, IsOrderClientOrAdmin]

    def post(self, request, pk):
        order_id = parse_pk(pk, "order_id")
        order = Order.objects.filter(pk=order_id).first()
        if order is None:
            raise NotFound("Order not found.")
        self.check_object_permissions(request, order)

        serializer = CommunicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if data["is_internal"] and not is_admin(request.user):
            raise PermissionDenied("Only admins can write internal notes.")

        entry = lifecycle.add_communication(order, request.user, data["message"], data["is_internal"])
        return Response(CommunicationEntrySerializer(entry).data, status=status.HTTP_201_CREATED)
