import math

from rest_framework.pagination import BasePagination
from rest_framework.response import Response


def _positive_int(raw, default):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


class PageLimitPagination(BasePagination):
    """
    `?page=&limit=` pagination answering {"data": [...], "meta": {...}}.

    Bad or missing values fall back to the defaults instead of raising, and
    `limit` is capped at `max_limit`.
    """
    default_limit = 10
    max_limit = 100
    results_key = "data"

    def get_params(self, request):
        page = _positive_int(request.query_params.get("page"), 1)
        limit = min(_positive_int(request.query_params.get("limit"), self.default_limit), self.max_limit)
        return page, limit

    def paginate_queryset(self, queryset, request, view=None):
        # views name their collection, e.g. results_key = "evaluations"
        self.results_key = getattr(view, "results_key", self.results_key)
        self.page, self.limit = self.get_params(request)
        self.total = len(queryset) if isinstance(queryset, list) else queryset.count()
        start = (self.page - 1) * self.limit
        return list(queryset[start:start + self.limit])

    def get_meta(self):
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": max(1, math.ceil(self.total / self.limit)),
        }

    def get_paginated_response(self, data):
        return Response({self.results_key: data, "meta": self.get_meta()})
