# magnaporta_backend/pagination.py
"""
Page/limit pagination used by the ``/paginated`` endpoints.

Output shape:
    {"data": [...], "meta": {"totalItems", "itemsPerPage", "totalPages", "currentPage"}}
"""

import math
from dataclasses import dataclass

from rest_framework import serializers

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int
    order_by: str
    order: str

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def ordering(self) -> str:
        return self.order_by if self.order == "ASC" else f"-{self.order_by}"


class PaginationQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, required=False, default=DEFAULT_LIMIT)
    order_by = serializers.CharField(required=False, allow_blank=True)
    order = serializers.CharField(required=False, allow_blank=True)

    def validate_order(self, value):
        value = (value or "DESC").upper()
        if value not in ("ASC", "DESC"):
            raise serializers.ValidationError("order must be ASC or DESC.")
        return value


def parse_page_params(query_params, allowed_order_by=("created_at",), default_order_by="created_at") -> PageParams:
    """
    Validate pagination query params.

    ``limit`` is capped at MAX_LIMIT rather than rejected. ``order_by``
    must be one of ``allowed_order_by``.
    """
    serializer = PaginationQuerySerializer(data=query_params)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    order_by = data.get("order_by") or default_order_by
    if order_by not in allowed_order_by:
        raise serializers.ValidationError(
            {"order_by": [f"order_by must be one of: {', '.join(allowed_order_by)}."]}
        )

    return PageParams(
        page=data["page"],
        limit=min(data["limit"], MAX_LIMIT),
        order_by=order_by,
        order=data.get("order") or "DESC",
    )


def paginate(queryset, params: PageParams, serializer_class, context=None) -> dict:
    queryset = queryset.order_by(params.ordering, "-pk" if params.order == "DESC" else "pk")
    total = queryset.count()
    items = queryset[params.offset:params.offset + params.limit]

    return {
        "data": serializer_class(items, many=True, context=context or {}).data,
        "meta": {
            "totalItems": total,
            "itemsPerPage": params.limit,
            "totalPages": math.ceil(total / params.limit) if total else 0,
            "currentPage": params.page,
        },
    }
