"""
Django middleware for request-level correlation ID tracking.
"""
import uuid

from config.logging_filters import clear_correlation_id, set_correlation_id

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware:
    """Use the caller's correlation id or mint a short one, and echo it back."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        cid = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex[:8]
        request.correlation_id = cid
        set_correlation_id(cid)
        try:
            response = self.get_response(request)
        finally:
            clear_correlation_id()
        response[CORRELATION_HEADER] = cid
        return response
