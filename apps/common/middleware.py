"""
Common middleware for the Mesa POS promotions engine
Request correlation for logs and responses.
"""

import logging
import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from apps.common.logging import clear_request_context, set_request_context

logger = logging.getLogger(__name__)

# ===============================================================================
# REQUEST ID MIDDLEWARE
# ===============================================================================

class RequestIDMiddleware:
    """Add unique request ID for tracing"""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Honour an upstream ID (load balancer, POS terminal) when present
        request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        request.META['REQUEST_ID'] = request_id
        set_request_context(request_id=request_id)

        try:
            response = self.get_response(request)
        finally:
            clear_request_context()

        response['X-Request-ID'] = request_id
        return response
