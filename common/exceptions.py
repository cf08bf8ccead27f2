"""Shared API exceptions and the project-wide exception handler.

Every error leaves the API as `{"message": ..., "errors": [...]}`. The
`errors` list is only present for validation failures.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class InvalidState(APIException):
    """The record's current status does not allow the requested action."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The requested action is not allowed in the current state."
    default_code = "invalid_state"


class Conflict(APIException):
    """The record changed between read and write (lost compare-and-swap)."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record was modified concurrently. Reload and try again."
    default_code = "conflict"


class PaymentProcessingFailed(APIException):
    """The payment processor rejected the request or could not be reached."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Payment processing failed."
    default_code = "payment_processing_failed"

    def __init__(self, detail=None, code=None, status_code=None):
        super().__init__(detail, code)
        if status_code is not None:
            self.status_code = status_code


# ------------------------------ helpers ------------------------------

def _flatten_errors(detail, prefix=""):
    """Turn DRF's nested error dict/list into a flat list of field messages."""
    errors = []
    if isinstance(detail, dict):
        for key, value in detail.items():
            field = f"{prefix}.{key}" if prefix else str(key)
            errors.extend(_flatten_errors(value, field))
    elif isinstance(detail, (list, tuple)):
        for item in detail:
            errors.extend(_flatten_errors(item, prefix))
    else:
        errors.append({"field": prefix or "non_field_errors", "message": str(detail)})
    return errors


def _message_from(data, default):
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    if isinstance(data, (list, tuple)) and data:
        return str(data[0])
    if isinstance(data, str):
        return data
    return default


# ------------------------------ handler ------------------------------

def api_exception_handler(exc, context):
    """Render DRF and unhandled exceptions as the standard error envelope."""
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", view.__class__.__name__ if view else "unknown view"
        )
        return Response(
            {"message": "Server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        response.data = {
            "message": "Validation failed",
            "errors": _flatten_errors(exc.detail),
        }
        return response

    response.data = {"message": _message_from(response.data, "Request failed")}
    return response
