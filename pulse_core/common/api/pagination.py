# pulse_core/common/api/pagination.py
from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class PagePagination(PageNumberPagination):
    """
    ?page=N&page_size=M. Ledgers stay small per project, so the cap is low.
    """
    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response(
            {
                "count": self.page.paginator.count,
                "page": self.page.number,
                "page_size": self.get_page_size(self.request),
                "next": self.get_next_link(),
                "previous": self.get_previous_link(),
                "results": data,
            }
        )


def paginate(request, queryset, serializer_class, **serializer_kwargs) -> Response:
    """
    Paginate + serialize in one step for plain ViewSets.
    Response shape: {count, page, page_size, next, previous, results}.
    """
    paginator = PagePagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(serializer_class(page, many=True, **serializer_kwargs).data)
