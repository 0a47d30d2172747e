"""Page/limit pagination shared by list endpoints.

Repositories paginate explicitly (limit/offset) and return the total count,
so the API layer only validates the ``page``/``limit`` query parameters and
renders the envelope.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from django.conf import settings
from rest_framework import serializers
from rest_framework.response import Response


def default_page_size() -> int:
    return settings.REST_FRAMEWORK.get("PAGE_SIZE", 20)


def max_page_size() -> int:
    return getattr(settings, "ORDERS_MAX_PAGE_SIZE", 100)


class PageQuerySerializer(serializers.Serializer):
    """Validates ``page`` (1-based) and ``limit`` query parameters.

    ``limit`` is capped at ``ORDERS_MAX_PAGE_SIZE``; when omitted it falls
    back to ``default_limit`` or the project-wide ``PAGE_SIZE``.
    """

    default_limit: Optional[int] = None

    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, required=False)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        attrs = super().validate(attrs)
        limit = attrs.get("limit") or self.default_limit or default_page_size()
        attrs["limit"] = min(limit, max_page_size())
        return attrs


def paginated_response(
    results: List[Any], *, total: int, page: int, limit: int
) -> Response:
    return Response(
        {
            "count": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit) if limit else 0,
            "results": results,
        }
    )
