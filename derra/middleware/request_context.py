"""
Request context middleware.

WHAT: Gives every request an id, exposes it to the rest of the code via a
ContextVar, and writes one access-log line per request.

WHY: Log lines from services and storage backends carry the request id
(see derra.core.logging_config), so one request can be followed from
the access line down to the storage call that failed.

HOW: Stored both on request.state (handlers) and in a ContextVar
(services and storage, which never see the request object).
"""

import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class RequestContext:
    """Request-scoped data captured on entry."""

    request_id: str
    client_ip: str
    path: str
    method: str


_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """The current request's context, or None outside a request."""
    return _request_context.get()


def get_client_ip(request: Request) -> str:
    """
    Client address, preferring proxy headers.

    X-Forwarded-For can be spoofed unless a trusted proxy overwrites it;
    the value is only used for logging.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that binds a RequestContext and logs the request.

    An incoming X-Request-ID header is reused so ids survive a proxy hop;
    otherwise a UUID4 is generated. The id is echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        context = RequestContext(
            request_id=request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4()),
            client_ip=get_client_ip(request),
            path=request.url.path,
            method=request.method,
        )
        request.state.context = context
        token = _request_context.set(context)

        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = context.request_id

            logger.info(
                "%s %s %s %.1fms",
                context.method,
                context.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
            return response
        finally:
            _request_context.reset(token)
