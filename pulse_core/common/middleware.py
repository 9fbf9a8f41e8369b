# pulse_core/common/middleware.py
from __future__ import annotations

from django.utils.deprecation import MiddlewareMixin

from pulse_core.common.api.exceptions import ensure_request_id


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches a request id to every request and echoes it back as X-Request-Id.
    Error envelopes reuse the same id so client reports can be matched to server logs.
    """

    HEADER = "X-Request-Id"

    def process_request(self, request):
        incoming = request.headers.get(self.HEADER)
        if incoming:
            request.request_id = incoming[:64]
        ensure_request_id(request)

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid and not response.has_header(self.HEADER):
            response[self.HEADER] = rid
        return response
