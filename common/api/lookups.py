"""Helpers for reading identifiers from URLs and request bodies."""

from rest_framework.exceptions import ValidationError


def parse_pk(raw, label: str = "id") -> int:
    """Return `raw` as a primary key or raise a 400 for malformed identifiers."""
    value = str(raw).strip() if raw is not None else ""
    if not (value.isascii() and value.isdigit()):
        raise ValidationError({label: f"Invalid {label.replace('_', ' ')}."})
    return int(value)
