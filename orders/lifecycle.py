"""Order lifecycle: creation and status transitions.

Dedicated actions (confirm payment, approve, reject) are looked up in
TRANSITIONS, which maps an action to the statuses it may start from and the
status it produces. Anything else is rejected centrally with InvalidState.
`set_status` is the admin override that may move an order between any two
statuses.

Every status write is a compare-and-swap on the status the caller observed,
so two concurrent actions on one order cannot both succeed; the loser gets
Conflict. The status write and its communication entry share one
transaction.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from common.exceptions import Conflict, InvalidState
from common.identifiers import create_with_reference
from services.models import Service
from .models import Order, OrderCommunication

logger = logging.getLogger(__name__)

Status = Order.Status

TRANSITIONS = {
    "confirm_payment": (frozenset({Status.PENDING.value}), Status.PAYMENT_CONFIRMED.value),
    "approve": (frozenset({Status.PAYMENT_CONFIRMED.value}), Status.APPROVED.value),
    "reject": (
        frozenset(Status.values) - {Status.COMPLETED.value, Status.CANCELLED.value},
        Status.REJECTED.value,
    ),
}

_REFUSALS = {
    "confirm_payment": "Only pending orders can be paid.",
    "approve": "Order must be in payment_confirmed status to be approved.",
    "reject": "Completed or cancelled orders cannot be rejected.",
}


def next_status(order: Order, action: str) -> str:
    """Return the status `action` leads to from the order's current status."""
    sources, target = TRANSITIONS[action]
    if order.status not in sources:
        raise InvalidState(f"{_REFUSALS[action]} Current status: {order.status}.")
    return target


def _swap(order: Order, expected: str, **fields):
    """Write `fields` only if the stored status is still `expected`."""
    fields["updated_at"] = timezone.now()
    updated = Order.objects.filter(pk=order.pk, status=expected).update(**fields)
    if not updated:
        logger.warning("Order %s changed concurrently (expected %s)", order.order_number, expected)
        raise Conflict()
    for name, value in fields.items():
        setattr(order, name, value)


def _log(order: Order, author, message: str, is_internal: bool = False) -> OrderCommunication:
    return OrderCommunication.objects.create(
        order=order, author=author, message=message[:2000], is_internal=is_internal
    )


# ----------------------------------- creation -----------------------------------

def create_order(client, service: Service, *, quantity: int, requirements: str,
                 contact_preference: str, timeline: str = "", additional_notes: str = "",
                 unit_amount=None, source_quote=None) -> Order:
    """Create a pending order; the total is unit amount x quantity, computed once.

    `unit_amount` defaults to the service price (a missing price counts as 0).
    """
    if unit_amount is None:
        unit_amount = service.pricing_amount or Decimal("0")
    subtotal = Decimal(unit_amount) * quantity
    tax = Decimal("0")
    total = subtotal + tax

    order = create_with_reference(
        Order,
        "order_number",
        "ORD",
        client=client,
        service=service,
        source_quote=source_quote,
        quantity=quantity,
        total_amount=subtotal,
        pricing_subtotal=subtotal,
        pricing_tax=tax,
        pricing_total=total,
        pricing_currency=service.pricing_currency,
        requirements=requirements,
        timeline=timeline or "",
        contact_preference=contact_preference,
        additional_notes=additional_notes or "",
        status=Status.PENDING,
    )
    logger.info("Order %s created by client %s (total %s)", order.order_number, client.id, total)
    return order


# ---------------------------------- transitions ----------------------------------

@transaction.atomic
def approve(order: Order, admin, notes: str = "") -> Order:
    """payment_confirmed -> approved; records approver, time and notes."""
    expected = order.status
    target = next_status(order, "approve")
    _swap(
        order,
        expected,
        status=target,
        approved_by=admin,
        approved_at=timezone.now(),
        admin_notes=notes or "",
    )
    message = "Order approved."
    if notes:
        message = f"{message} {notes}"
    _log(order, admin, message)
    logger.info("Order %s approved by %s", order.order_number, admin.id)
    return order


@transaction.atomic
def reject(order: Order, admin, reason: str) -> Order:
    """Any status except completed/cancelled -> rejected; the reason is stored verbatim."""
    expected = order.status
    target = next_status(order, "reject")
    _swap(
        order,
        expected,
        status=target,
        rejected_by=admin,
        rejected_at=timezone.now(),
        rejection_reason=reason,
    )
    _log(order, admin, f"Order rejected. Reason: {reason}")
    logger.info("Order %s rejected by %s (was %s)", order.order_number, admin.id, expected)
    return order


@transaction.atomic
def set_status(order: Order, admin, new_status: str, notes: str = "") -> Order:
    """Admin override: any status to any status, bypassing TRANSITIONS."""
    expected = order.status
    _swap(order, expected, status=new_status)
    if notes:
        _log(order, admin, f"Status updated to {new_status}. {notes}")
    logger.info(
        "Order %s status overridden %s -> %s by %s", order.order_number, expected, new_status, admin.id
    )
    return order


@transaction.atomic
def confirm_payment(order: Order, *, transaction_id: str, method: str = Order.PaymentMethod.STRIPE,
                    intent_id: str = "") -> Order:
    """pending -> payment_confirmed; marks the payment sub-record completed."""
    expected = order.status
    target = next_status(order, "confirm_payment")
    fields = {
        "status": target,
        "payment_status": Order.PaymentStatus.COMPLETED,
        "payment_method": method,
        "payment_transaction_id": transaction_id or "",
        "paid_at": timezone.now(),
    }
    if intent_id:
        fields["payment_intent_id"] = intent_id
    _swap(order, expected, **fields)
    logger.info("Order %s payment confirmed (%s)", order.order_number, transaction_id)
    return order


def record_payment_failure(order: Order, intent_id: str = "") -> Order:
    """Mark the payment sub-record failed; the order status is left alone."""
    order.payment_status = Order.PaymentStatus.FAILED
    fields = ["payment_status", "updated_at"]
    if intent_id:
        order.payment_intent_id = intent_id
        fields.append("payment_intent_id")
    order.save(update_fields=fields)
    return order


def attach_intent(order: Order, intent_id: str) -> Order:
    order.payment_intent_id = intent_id
    order.save(update_fields=["payment_intent_id", "updated_at"])
    return order


def assign(order: Order, staff_user, admin) -> Order:
    order.assigned_to = staff_user
    order.save(update_fields=["assigned_to", "updated_at"])
    logger.info("Order %s assigned to %s by %s", order.order_number, staff_user.id, admin.id)
    return order


# --------------------------------- communication ---------------------------------

def add_communication(order: Order, author, message: str, is_internal: bool = False) -> OrderCommunication:
    """Append one entry to the order's log; earlier entries are never touched."""
    entry = _log(order, author, message, is_internal)
    logger.info("Order %s: message %s appended by %s", order.order_number, entry.id, author.id)
    return entry
