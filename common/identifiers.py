"""Human-readable reference numbers (order/quote numbers).

Numbers look like `ORD-1718000000000-K3Z9Q`: a millisecond timestamp plus a
random base36 suffix. The suffix alone does not guarantee uniqueness, so rows
are inserted under a unique constraint and regenerated on collision.
"""

import logging
import secrets
import string
import time

from django.db import IntegrityError, transaction

logger = logging.getLogger(__name__)

_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 5
MAX_ATTEMPTS = 5


def generate_reference(prefix: str) -> str:
    """Return `<prefix>-<epoch ms>-<5 random base36 chars>`."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


def create_with_reference(model, field: str, prefix: str, **values):
    """Create a `model` row with a fresh reference in `field`, retrying on collision.

    Any IntegrityError is treated as a collision; after MAX_ATTEMPTS the last
    error propagates.
    """
    for attempt in range(1, MAX_ATTEMPTS + 1):
        reference = generate_reference(prefix)
        try:
            with transaction.atomic():
                return model.objects.create(**{field: reference}, **values)
        except IntegrityError:
            if attempt == MAX_ATTEMPTS:
                raise
            logger.warning(
                "%s %s collided on attempt %d, regenerating", model.__name__, reference, attempt
            )
