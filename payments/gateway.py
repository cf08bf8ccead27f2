"""Stripe PaymentIntents adapter.

The only module that talks to the payment processor. Calls are synchronous,
not retried and carry no idempotency key; a failed call may therefore be
resubmitted by the client. Card declines are a normal outcome of
`process_payment`; every other processor error becomes
PaymentProcessingFailed: 502 when Stripe cannot be reached or fails on its
side, 400 for errors it reports about the request.
"""

import logging
from collections import namedtuple
from decimal import ROUND_HALF_UP, Decimal

import stripe
from django.conf import settings
from rest_framework import status

from common.exceptions import PaymentProcessingFailed

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"
REQUIRES_ACTION = "requires_action"
FAILED = "failed"

PaymentOutcome = namedtuple("PaymentOutcome", ["status", "intent", "message"])

_http_clients = {}


def _http_client(timeout):
    """One RequestsClient (and session) per configured timeout."""
    client = _http_clients.get(timeout)
    if client is None:
        client = _http_clients[timeout] = stripe.RequestsClient(timeout=timeout)
    return client


def _configure():
    if not settings.STRIPE_SECRET_KEY:
        raise PaymentProcessingFailed(
            "Payment processor is not configured.",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    stripe.api_key = settings.STRIPE_SECRET_KEY
    stripe.max_network_retries = 0
    stripe.default_http_client = _http_client(settings.STRIPE_TIMEOUT_SECONDS)


def _call(operation: str, fn, **params):
    """Run a Stripe call; declines propagate, anything else is mapped."""
    _configure()
    try:
        return fn(**params)
    except stripe.CardError:
        raise
    except (stripe.APIConnectionError, stripe.APIError) as exc:
        logger.error("Stripe %s unreachable: %s", operation, exc)
        raise PaymentProcessingFailed(
            "Payment processor unavailable.",
            status_code=status.HTTP_502_BAD_GATEWAY,
        ) from exc
    except stripe.StripeError as exc:
        logger.error("Stripe %s failed: %s", operation, exc)
        raise PaymentProcessingFailed("Payment processing error.") from exc


def to_minor_units(amount) -> int:
    """12.345 -> 1235 (half-up on the cent)."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _intent_params(order) -> dict:
    return {
        "amount": to_minor_units(order.total_amount),
        "currency": settings.PAYMENT_CURRENCY,
        "metadata": {
            "order_id": str(order.pk),
            "order_number": order.order_number,
            "client_id": str(order.client_id),
            "service_title": order.service.title,
        },
    }


def create_intent(order):
    """Create a PaymentIntent for the order total; the client confirms it."""
    intent = _call("create intent", stripe.PaymentIntent.create, **_intent_params(order))
    logger.info("Created payment intent %s for order %s", intent.id, order.order_number)
    return intent


def retrieve_intent(intent_id: str):
    return _call("retrieve intent", stripe.PaymentIntent.retrieve, id=intent_id)


def transaction_id(intent) -> str:
    """The charge id when Stripe reports one, else the intent id."""
    charge = getattr(intent, "latest_charge", None)
    if charge:
        return getattr(charge, "id", charge)
    return intent.id


def process_payment(order, payment_method_id: str) -> PaymentOutcome:
    """Create and confirm an intent in one call.

    Returns one of three outcomes: SUCCEEDED, REQUIRES_ACTION (the client has
    to finish e.g. 3-D Secure with `intent.client_secret`) or FAILED.
    """
    params = _intent_params(order)
    params.update(
        payment_method=payment_method_id,
        payment_method_types=["card"],
        confirm=True,
    )
    try:
        intent = _call("process payment", stripe.PaymentIntent.create, **params)
    except stripe.CardError as exc:
        message = exc.user_message or "Your card was declined."
        logger.info("Card declined for order %s: %s", order.order_number, exc.code)
        return PaymentOutcome(FAILED, None, message)

    if intent.status == SUCCEEDED:
        return PaymentOutcome(SUCCEEDED, intent, "Payment processed successfully.")
    if intent.status == REQUIRES_ACTION:
        return PaymentOutcome(REQUIRES_ACTION, intent, "Additional authentication required.")
    logger.warning("Intent %s for order %s ended in %s", intent.id, order.order_number, intent.status)
    return PaymentOutcome(FAILED, intent, f"Payment failed with status {intent.status}.")
