"""Quote lifecycle: requests, admin responses and client decisions.

An admin responds once to a pending quote, either accepting it (with a quoted
amount) or rejecting it. The client may then take an accepted quote, which
converts it into a pending Order exactly once, or turn it down. Status writes
are compare-and-swap on the observed status, as for orders.

Expiry is recorded on creation but not enforced here.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from common.exceptions import Conflict, InvalidState
from common.identifiers import create_with_reference
from orders import lifecycle as order_lifecycle
from orders.models import Order
from .models import Quote, QuoteCommunication

logger = logging.getLogger(__name__)

Status = Quote.Status

# action -> (allowed source statuses, resulting status); "respond" lets the admin pick.
TRANSITIONS = {
    "respond": (frozenset({Status.PENDING.value}), None),
    "accept": (frozenset({Status.ACCEPTED.value}), Status.ACCEPTED.value),
    "reject": (frozenset({Status.ACCEPTED.value}), Status.REJECTED.value),
}

_REFUSALS = {
    "respond": "Quote has already been responded to.",
    "accept": "Quote is not in accepted status.",
    "reject": "Quote is not in accepted status.",
}


def _check(quote: Quote, action: str):
    sources, target = TRANSITIONS[action]
    if quote.status not in sources:
        raise InvalidState(f"{_REFUSALS[action]} Current status: {quote.status}.")
    return target


def _swap(quote: Quote, expected: str, **fields):
    fields["updated_at"] = timezone.now()
    updated = Quote.objects.filter(pk=quote.pk, status=expected).update(**fields)
    if not updated:
        logger.warning("Quote %s changed concurrently (expected %s)", quote.quote_number, expected)
        raise Conflict()
    for name, value in fields.items():
        setattr(quote, name, value)


def _log(quote: Quote, author, message: str, is_internal: bool = False) -> QuoteCommunication:
    return QuoteCommunication.objects.create(
        quote=quote, author=author, message=message[:2000], is_internal=is_internal
    )


def create_quote(client, service, *, custom_amount, requirements: str, contact_preference: str,
                 timeline: str = "", additional_notes: str = "", priority: str = Quote.Priority.MEDIUM) -> Quote:
    """Create a pending quote request that expires QUOTE_VALIDITY_DAYS from now."""
    quote = create_with_reference(
        Quote,
        "quote_number",
        "QUO",
        client=client,
        service=service,
        custom_amount=custom_amount,
        requirements=requirements,
        timeline=timeline or "",
        contact_preference=contact_preference,
        additional_notes=additional_notes or "",
        priority=priority,
        expires_at=timezone.now() + timedelta(days=settings.QUOTE_VALIDITY_DAYS),
        status=Status.PENDING,
    )
    logger.info("Quote %s requested by client %s", quote.quote_number, client.id)
    return quote


@transaction.atomic
def respond(quote: Quote, admin, *, quoted_amount, response: str, status: str) -> Quote:
    """pending -> accepted | rejected, recording the admin's counter-offer."""
    expected = quote.status
    _check(quote, "respond")
    if status not in (Status.ACCEPTED, Status.REJECTED):
        raise InvalidState("Status must be accepted or rejected.")
    _swap(
        quote,
        expected,
        status=status,
        quoted_amount=quoted_amount,
        admin_response=response,
        responded_by=admin,
        responded_at=timezone.now(),
    )
    _log(quote, admin, f"Quote {status}. {response}")
    logger.info("Quote %s %s by %s", quote.quote_number, status, admin.id)
    return quote


@transaction.atomic
def accept(quote: Quote, client) -> Order:
    """Convert an accepted quote into a pending order; only once per quote."""
    _check(quote, "accept")
    locked = Quote.objects.select_for_update().get(pk=quote.pk)
    if locked.status != quote.status:
        raise Conflict()
    if Order.objects.filter(source_quote=locked).exists():
        raise InvalidState("Quote has already been converted to an order.")

    order = order_lifecycle.create_order(
        client,
        locked.service,
        quantity=1,
        requirements=locked.requirements,
        contact_preference=locked.contact_preference,
        timeline=locked.timeline,
        additional_notes=locked.additional_notes,
        unit_amount=locked.agreed_amount,
        source_quote=locked,
    )
    _swap(quote, quote.status)
    _log(quote, client, f"Quote accepted by client. Order {order.order_number} created.")
    logger.info("Quote %s converted to order %s", quote.quote_number, order.order_number)
    return order


@transaction.atomic
def reject(quote: Quote, client) -> Quote:
    """The client turns down an accepted quote."""
    expected = quote.status
    target = _check(quote, "reject")
    if Order.objects.filter(source_quote=quote).exists():
        raise InvalidState("Quote has already been converted to an order.")
    _swap(quote, expected, status=target)
    _log(quote, client, "Quote rejected by client.")
    logger.info("Quote %s rejected by client %s", quote.quote_number, client.id)
    return quote


def add_communication(quote: Quote, author, message: str, is_internal: bool = False) -> QuoteCommunication:
    """Append one entry to the quote's log."""
    entry = _log(quote, author, message, is_internal)
    logger.info("Quote %s: message %s appended by %s", quote.quote_number, entry.id, author.id)
    return entry
