"""Quotes API views.

Clients request quotes for quote-priced services and decide on the admin's
response; admins see every quote and respond to pending ones. Both parties
may append to a quote's communication log.
"""

import logging

from django.core.exceptions import ObjectDoesNotExist
from rest_framework import generics, status
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.api.lookups import parse_pk
from common.api.serializers import CommunicationCreateSerializer, CommunicationEntrySerializer
from common.pagination import PortalPagination
from orders.api.serializers import OrderSerializer
from profiles.api.permissions import IsAdminRole, IsClientUser, is_admin
from quotes import lifecycle
from quotes.models import Quote
from .permissions import IsQuoteClient, IsQuoteClientOrAdmin
from .serializers import (
    QuoteCreateSerializer,
    QuoteListSerializer,
    QuoteRespondSerializer,
    QuoteSerializer,
)

logger = logging.getLogger(__name__)


# ----------------------------- helpers (module-level) -----------------------------

def _visible_quotes(user):
    if not user or not user.is_authenticated:
        return Quote.objects.none()
    qs = Quote.objects.select_related("service", "client", "converted_order")
    if is_admin(user):
        return qs
    return qs.filter(client=user)


def _map_service_not_found(exc: ValidationError):
    detail = exc.detail
    if isinstance(detail, dict) and "service_id" in detail:
        msgs = detail["service_id"]
        if not isinstance(msgs, (list, tuple)):
            msgs = [msgs]
        if any("not found" in str(m).lower() for m in msgs):
            raise NotFound("Service not found.")


def _get_quote(pk, user) -> Quote:
    quote_id = parse_pk(pk, "quote_id")
    quote = _visible_quotes(user).filter(pk=quote_id).first()
    if quote is None:
        raise NotFound("Quote not found.")
    if not is_admin(user) and quote.client_id != user.id:
        logger.error("Quote %s leaked past client scoping for user %s", quote.pk, user.id)
        raise NotFound("Quote not found.")
    return quote


def _load_quote(pk) -> Quote:
    """Unscoped lookup for endpoints that answer 403 (not 404) to strangers."""
    try:
        return Quote.objects.select_related("service").get(pk=parse_pk(pk, "quote_id"))
    except ObjectDoesNotExist:
        raise NotFound("Quote not found.")


def _quote_response(quote, request, code=status.HTTP_200_OK):
    return Response(QuoteSerializer(quote, context={"request": request}).data, status=code)


# --------------------------------------- views ---------------------------------------

class QuoteListCreateAPIView(generics.ListCreateAPIView):
    """GET: paginated quotes visible to the caller, optional ?status= filter.
    POST: request a quote for a quote-priced service (client-only).
    """

    pagination_class = PortalPagination

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), IsClientUser()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        return QuoteListSerializer if self.request.method == "GET" else QuoteCreateSerializer

    def get_queryset(self):
        qs = _visible_quotes(self.request.user)
        status_filter = self.request.query_params.get("status")
        if status_filter:
            if status_filter not in Quote.Status.values:
                raise ValidationError({"status": "Unknown quote status."})
            qs = qs.filter(status=status_filter)
        return qs.order_by("-created_at", "-id")

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except ValidationError as exc:
            _map_service_not_found(exc)
            raise
        data = serializer.validated_data
        quote = lifecycle.create_quote(
            request.user,
            serializer.context["service_obj"],
            custom_amount=data["custom_amount"],
            requirements=data["requirements"],
            contact_preference=data["contact_preference"],
            timeline=data.get("timeline", ""),
            additional_notes=data.get("additional_notes", ""),
            priority=data["priority"],
        )
        return _quote_response(quote, request, status.HTTP_201_CREATED)


class QuoteDetailAPIView(APIView):
    """GET /api/v1/quotes/{id}/ -> full quote incl. communication log."""

    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        return _quote_response(_get_quote(pk, request.user), request)


class QuoteRespondAPIView(APIView):
    """PUT /api/v1/quotes/{id}/respond/ -> accept or reject a pending quote (admin)."""

    permission_classes = [IsAuthenticated, IsAdminRole]

    def put(self, request, pk):
        serializer = QuoteRespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quote = _get_quote(pk, request.user)
        data = serializer.validated_data
        lifecycle.respond(
            quote,
            request.user,
            quoted_amount=data["quoted_amount"],
            response=data["response"],
            status=data["status"],
        )
        return _quote_response(quote, request)


class QuoteAcceptAPIView(APIView):
    """PUT /api/v1/quotes/{id}/accept/ -> convert an accepted quote into an order (owner)."""

    permission_classes = [IsAuthenticated, IsClientUser, IsQuoteClient]

    def put(self, request, pk):
        quote = _load_quote(pk)
        self.check_object_permissions(request, quote)
        order = lifecycle.accept(quote, request.user)
        return Response(
            {
                "quote": QuoteSerializer(quote, context={"request": request}).data,
                "order": OrderSerializer(order, context={"request": request}).data,
            },
            status=status.HTTP_201_CREATED,
        )


class QuoteRejectAPIView(APIView):
    """PUT /api/v1/quotes/{id}/reject/ -> turn down an accepted quote (owner)."""

    permission_classes = [IsAuthenticated, IsClientUser, IsQuoteClient]

    def put(self, request, pk):
        quote = _load_quote(pk)
        self.check_object_permissions(request, quote)
        lifecycle.reject(quote, request.user)
        return _quote_response(quote, request)


class QuoteCommunicationAPIView(APIView):
    """POST /api/v1/quotes/{id}/communication/ -> append a message."""

    permission_classes = [IsAuthenticated, IsQuoteClientOrAdmin]

    def post(self, request, pk):
        quote = _load_quote(pk)
        self.check_object_permissions(request, quote)

        serializer = CommunicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if data["is_internal"] and not is_admin(request.user):
            raise PermissionDenied("Only admins can write internal notes.")

        entry = lifecycle.add_communication(quote, request.user, data["message"], data["is_internal"])
        return Response(CommunicationEntrySerializer(entry).data, status=status.HTTP_201_CREATED)
