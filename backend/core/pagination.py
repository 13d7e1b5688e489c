"""
Page/limit pagination shared by list endpoints.
"""
import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class PagePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'limit'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            'results': data,
            'pagination': {
                'total': self.page.paginator.count,
                'page': self.page.number,
                'limit': self.get_page_size(self.request),
                'pages': self.page.paginator.num_pages,
            },
        })


def _positive_int(value, default):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def paginate(queryset, request, default_limit=10, max_limit=100):
    """
    Slices a queryset using the ``page`` and ``limit`` query parameters.

    Returns the page of items and the pagination block the list endpoints
    embed in their responses.
    """
    page = _positive_int(request.query_params.get('page'), 1)
    limit = min(_positive_int(request.query_params.get('limit'), default_limit), max_limit)
    total = queryset.count()
    skip = (page - 1) * limit
    items = list(queryset[skip:skip + limit])
    return items, {
        'total': total,
        'page': page,
        'limit': limit,
        'pages': math.ceil(total / limit) if total else 0,
    }
