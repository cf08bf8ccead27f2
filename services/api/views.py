"""Services API views.

Public catalog browsing with pagination, searching, filtering and sorting;
featured and category listings; a detail route with related services.
Creating, updating and (soft) deleting services is admin-only.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db.models import Count
from django.db.models import Q
from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.api.lookups import parse_pk
from common.pagination import ServicesPagination
from profiles.api.permissions import IsAdminRole, is_admin
from services.models import Service
from .serializers import (
    ServiceDetailSerializer,
    ServiceSerializer,
    ServiceWriteSerializer,
)

logger = logging.getLogger(__name__)

SORT_OPTIONS = {
    "price_asc": ("pricing_amount",),
    "price_desc": ("-pricing_amount",),
    "rating": ("-rating_average",),
    "newest": ("-created_at",),
}


# ----------------------------- helpers (module-level) -----------------------------

def _parse_decimal(params, name):
    raw = params.get(name)
    if raw in (None, ""):
        return None
    try:
        return Decimal(raw)
    except (InvalidOperation, TypeError):
        raise ValidationError({name: "Must be a number."})


def _apply_filters(qs, params):
    category = params.get("category")
    if category:
        if category not in Service.Category.values:
            raise ValidationError({"category": "Unknown category."})
        qs = qs.filter(category=category)

    search = params.get("search")
    if search:
        qs = qs.filter(
            Q(title__icontains=search)
            | Q(description__icontains=search)
            | Q(tags__icontains=search.lower())
        )

    min_price = _parse_decimal(params, "min_price")
    if min_price is not None:
        qs = qs.filter(pricing_amount__gte=min_price)

    max_price = _parse_decimal(params, "max_price")
    if max_price is not None:
        qs = qs.filter(pricing_amount__lte=max_price)

    return qs


def _apply_ordering(qs, params):
    sort = params.get("sort") or "newest"
    if sort not in SORT_OPTIONS:
        raise ValidationError(
            {"sort": "Allowed values: price_asc, price_desc, rating, newest."}
        )
    ordering = SORT_OPTIONS[sort]
    # Featured services float to the top unless the caller is searching.
    if not params.get("search"):
        ordering = ("-is_featured",) + ordering
    return qs.order_by(*ordering, "-id")


# --------------------------------------- views ---------------------------------------

class ServiceListCreateAPIView(generics.ListCreateAPIView):
    """GET: public paginated catalog; POST: create a service (admin-only)."""

    queryset = Service.objects.all()
    pagination_class = ServicesPagination

    def get_permissions(self):
        """Allow only admins to create services; the catalog is public."""
        if self.request.method == "POST":
            return [IsAuthenticated(), IsAdminRole()]
        return [AllowAny()]

    def get_serializer_class(self):
        if self.request.method == "GET":
            return ServiceSerializer
        return ServiceWriteSerializer

    def get_queryset(self):
        qs = super().get_queryset().filter(is_active=True)
        qs = _apply_filters(qs, self.request.query_params)
        return _apply_ordering(qs, self.request.query_params)

    def create(self, request, *args, **kwargs):
        """Validate and create a service, returning the full representation."""
        serializer = self.get_serializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        service = serializer.save()
        logger.info("Service %s created by %s", service.id, request.user.id)
        return Response(ServiceSerializer(service).data, status=status.HTTP_201_CREATED)


class FeaturedServicesAPIView(generics.ListAPIView):
    """GET /api/v1/services/featured/ -> up to six active featured services."""

    serializer_class = ServiceSerializer
    permission_classes = [AllowAny]
    pagination_class = None

    def get_queryset(self):
        return Service.objects.filter(is_active=True, is_featured=True).order_by("-created_at", "-id")[:6]


class ServiceCategoriesAPIView(APIView):
    """GET /api/v1/services/categories/ -> [{name, count}] over active services."""

    permission_classes = [AllowAny]

    def get(self, request):
        rows = (
            Service.objects.filter(is_active=True)
            .values("category")
            .annotate(count=Count("id"))
            .order_by("-count", "category")
        )
        data = [{"name": r["category"], "count": r["count"]} for r in rows]
        return Response({"categories": data}, status=status.HTTP_200_OK)


class ServiceRetrieveUpdateDestroyAPIView(generics.RetrieveUpdateDestroyAPIView):
    """GET: public detail; PATCH/PUT: update (admin); DELETE: deactivate (admin)."""

    def get_permissions(self):
        if self.request.method in ["PATCH", "PUT", "DELETE"]:
            return [IsAuthenticated(), IsAdminRole()]
        return [AllowAny()]

    def get_queryset(self):
        """Admins can see inactive services; the public only active ones."""
        if is_admin(self.request.user):
            return Service.objects.all()
        return Service.objects.filter(is_active=True)

    def get_object(self):
        pk = parse_pk(self.kwargs["pk"], "service_id")
        obj = generics.get_object_or_404(self.get_queryset(), pk=pk)
        self.check_object_permissions(self.request, obj)
        return obj

    def get_serializer_class(self):
        if self.request.method in ["PATCH", "PUT"]:
            return ServiceWriteSerializer
        return ServiceDetailSerializer

    def update(self, request, *args, **kwargs):
        """Always a partial update; return the full service payload."""
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Service %s updated by %s", instance.id, request.user.id)
        return Response(ServiceSerializer(instance).data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        """Soft delete: the service is deactivated so existing orders keep their reference."""
        instance = self.get_object()
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])
        logger.info("Service %s deactivated by %s", instance.id, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)
