"""Request ID middleware — unique ID per request for tracing.

Learn: Every request gets a UUID, either from the incoming X-Request-ID
header or auto-generated. The ID (plus method and path) is bound to
structlog's contextvars only for the duration of the request, so logo
render failures and history lookups log with it, and whatever the caller
had bound before is restored afterwards. The ID is echoed in the response.

Websocket connections bypass this middleware; live log lines carry a
subscriber_id instead.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a unique request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        # An empty header counts as missing
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        ):
            response: Response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
