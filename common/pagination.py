"""Offset pagination shared by the list endpoints.

Clients pass `page` and `limit`; responses carry the page of results plus a
`pagination` block with the total count.
"""

import math

from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


def _positive_int(params, name, default, maximum=None):
    raw = params.get(name)
    if raw in (None, ""):
        return default
    raw = str(raw)
    if not (raw.isascii() and raw.isdigit()) or int(raw) < 1:
        raise ValidationError({name: "Must be a positive integer."})
    value = int(raw)
    if maximum is not None and value > maximum:
        raise ValidationError({name: f"Must be at most {maximum}."})
    return value


class PortalPagination(PageNumberPagination):
    """`?page=&limit=` pagination returning `{results, pagination}`."""

    page_size = 10
    page_query_param = "page"
    page_size_query_param = "limit"
    max_page_size = 100

    def paginate_queryset(self, queryset, request, view=None):
        """Validate page/limit up front so bad input is a 400, not a 404."""
        self.current_page = _positive_int(request.query_params, self.page_query_param, 1)
        self.limit = _positive_int(
            request.query_params, self.page_size_query_param, self.page_size, self.max_page_size
        )
        self.total = queryset.count()
        offset = (self.current_page - 1) * self.limit
        self.request = request
        return list(queryset[offset:offset + self.limit])

    def get_paginated_response(self, data):
        pages = math.ceil(self.total / self.limit) if self.total else 0
        return Response(
            {
                "results": data,
                "pagination": {
                    "current": self.current_page,
                    "pages": pages,
                    "total": self.total,
                    "limit": self.limit,
                    "has_next": self.current_page * self.limit < self.total,
                    "has_prev": self.current_page > 1,
                },
            }
        )


class ServicesPagination(PortalPagination):
    """Catalog pages default to 12 entries and cap at 50."""

    page_size = 12
    max_page_size = 50


class UsersPagination(PortalPagination):
    page_size = 20
