"""
Pagination accepting the `page` / `limit` query parameters used by the
back-office tables.
"""

from django.conf import settings
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    page_query_param = 'page'
    page_size_query_param = 'limit'

    @property
    def max_page_size(self):
        return settings.BILLING_MAX_PAGE_SIZE

    def get_paginated_response(self, data):
        return Response({
            'data': data,
            'pagination': {
                'page': self.page.number,
                'limit': self.get_page_size(self.request),
                'total': self.page.paginator.count,
                'total_pages': self.page.paginator.num_pages,
            },
        })
