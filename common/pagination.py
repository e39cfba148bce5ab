from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class EnvelopePagination(PageNumberPagination):
    """Shared pagination behavior for list endpoints.

    Clients page with `?page=` and `?limit=`; limits are capped to keep
    payload sizes predictable. Responses use the dashboard envelope
    `{success, total, page, total_pages, data}` instead of DRF's
    `count/next/previous/results`.
    """

    page_size_query_param = "limit"
    max_page_size = 200

    def get_paginated_response(self, data):
        return Response(
            {
                "success": True,
                "total": self.page.paginator.count,
                "page": self.page.number,
                "total_pages": self.page.paginator.num_pages if self.page.paginator.count else 0,
                "data": data,
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "required": ["success", "total", "page", "total_pages", "data"],
            "properties": {
                "success": {"type": "boolean"},
                "total": {"type": "integer"},
                "page": {"type": "integer"},
                "total_pages": {"type": "integer"},
                "data": schema,
            },
        }


def envelope(data, *, message=None, status=None):
    payload = {"success": True, "data": data}
    if message:
        payload["message"] = message
    return Response(payload, status=status)
