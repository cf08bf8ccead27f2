"""Payments API views.

Card payments for pending orders through Stripe PaymentIntents, either in
two steps (create an intent, confirm it after the browser has paid) or as a
single direct charge with a saved payment method. Only the client who placed
an order can pay for it.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import InvalidState
from orders import lifecycle
from orders.api.serializers import OrderSerializer
from orders.models import Order
from payments import gateway
from profiles.api.permissions import IsClientUser
from .serializers import (
    ConfirmPaymentSerializer,
    CreateIntentSerializer,
    ProcessPaymentSerializer,
)

logger = logging.getLogger(__name__)


class CreatePaymentIntentAPIView(APIView):
    """POST /api/v1/payments/create-payment-intent/ -> {client_secret, payment_intent_id}."""

    permission_classes = [IsAuthenticated, IsClientUser]

    def post(self, request):
        serializer = CreateIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = (
            Order.objects.select_related("service")
            .filter(
                pk=serializer.validated_data["order_id"],
                client=request.user,
                status=Order.Status.PENDING,
            )
            .first()
        )
        if order is None:
            raise NotFound("Order not found or not eligible for payment.")

        intent = gateway.create_intent(order)
        lifecycle.attach_intent(order, intent.id)
        return Response(
            {"client_secret": intent.client_secret, "payment_intent_id": intent.id},
            status=status.HTTP_200_OK,
        )


class ConfirmPaymentAPIView(APIView):
    """POST /api/v1/payments/confirm-payment/ -> advance the order once Stripe reports success."""

    permission_classes = [IsAuthenticated, IsClientUser]

    def post(self, request):
        serializer = ConfirmPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        intent = gateway.retrieve_intent(data["payment_intent_id"])
        if intent.status != gateway.SUCCEEDED:
            raise InvalidState("Payment not completed.")

        order = Order.objects.filter(
            pk=data["order_id"],
            client=request.user,
            payment_intent_id=data["payment_intent_id"],
        ).first()
        if order is None:
            raise NotFound("Order not found.")

        lifecycle.confirm_payment(
            order,
            transaction_id=gateway.transaction_id(intent),
            intent_id=intent.id,
        )
        return Response(
            {
                "message": "Payment confirmed successfully.",
                "order": OrderSerializer(order, context={"request": request}).data,
            },
            status=status.HTTP_200_OK,
        )


class ProcessPaymentAPIView(APIView):
    """POST /api/v1/payments/process/ -> charge a payment method directly.

    Three outcomes: success (order advanced), requires_action (client must
    finish authentication; order untouched) and failure (400, payment marked
    failed, order status untouched).
    """

    permission_classes = [IsAuthenticated, IsClientUser]

    def post(self, request):
        serializer = ProcessPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = Order.objects.select_related("service").filter(pk=data["order_id"]).first()
        if order is None:
            raise NotFound("Order not found.")
        if order.client_id != request.user.id:
            raise PermissionDenied("Not authorized to pay for this order.")
        if order.status != Order.Status.PENDING:
            raise InvalidState("Order is not in pending status.")

        outcome = gateway.process_payment(order, data["payment_method_id"])

        if outcome.status == gateway.SUCCEEDED:
            lifecycle.confirm_payment(
                order,
                transaction_id=gateway.transaction_id(outcome.intent),
                intent_id=outcome.intent.id,
            )
            return Response(
                {
                    "success": True,
                    "message": outcome.message,
                    "order": OrderSerializer(order, context={"request": request}).data,
                },
                status=status.HTTP_200_OK,
            )

        if outcome.status == gateway.REQUIRES_ACTION:
            lifecycle.attach_intent(order, outcome.intent.id)
            return Response(
                {
                    "success": False,
                    "requires_action": True,
                    "payment_intent": {
                        "id": outcome.intent.id,
                        "client_secret": outcome.intent.client_secret,
                        "status": outcome.intent.status,
                    },
                },
                status=status.HTTP_200_OK,
            )

        intent_id = outcome.intent.id if outcome.intent is not None else ""
        lifecycle.record_payment_failure(order, intent_id)
        return Response(
            {"success": False, "message": outcome.message},
            status=status.HTTP_400_BAD_REQUEST,
        )
