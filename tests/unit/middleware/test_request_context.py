"""
Request Context Middleware Tests.

WHY: Log lines are correlated through the request id, so the id must be
bound for the whole request, echoed to the client, and gone afterwards.

HOW: A two-route Starlette app wrapped in the middleware, driven through
httpx's ASGI transport.
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from derra.core.logging_config import RequestIdFilter
from derra.middleware.request_context import (
    REQUEST_ID_HEADER,
    RequestContextMiddleware,
    get_client_ip,
    get_request_context,
)


async def _echo_context(request: Request) -> JSONResponse:
    context = get_request_context()
    return JSONResponse(
        {
            "request_id": context.request_id,
            "client_ip": context.client_ip,
            "path": context.path,
            "method": context.method,
            "same_as_state": request.state.context is context,
        }
    )


def _app() -> Starlette:
    app = Starlette(routes=[Route("/ctx", _echo_context, methods=["GET", "POST"])])
    app.add_middleware(RequestContextMiddleware)
    return app


def _request(headers=None, client=("10.0.0.1", 1234)) -> Request:
    scope = {
        "type": "http",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestGetClientIp:
    def test_direct_client(self):
        assert get_client_ip(_request()) == "10.0.0.1"

    def test_first_forwarded_address_wins(self):
        request = _request({"X-Forwarded-For": "203.0.113.7, 10.0.0.2"})

        assert get_client_ip(request) == "203.0.113.7"

    def test_no_client(self):
        assert get_client_ip(_request(client=None)) == "unknown"


class TestMiddleware:
    @pytest.mark.asyncio
    async def test_generates_and_echoes_request_id(self):
        transport = ASGITransport(app=_app())
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/ctx")

        body = response.json()
        assert body["request_id"]
        assert response.headers[REQUEST_ID_HEADER] == body["request_id"]
        assert body["method"] == "POST"
        assert body["path"] == "/ctx"
        assert body["same_as_state"] is True

    @pytest.mark.asyncio
    async def test_reuses_incoming_request_id(self):
        transport = ASGITransport(app=_app())
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/ctx", headers={REQUEST_ID_HEADER: "req-123"})

        assert response.json()["request_id"] == "req-123"
        assert response.headers[REQUEST_ID_HEADER] == "req-123"

    @pytest.mark.asyncio
    async def test_context_is_cleared_after_request(self):
        transport = ASGITransport(app=_app())
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await client.get("/ctx")

        assert get_request_context() is None


class TestRequestIdFilter:
    def test_outside_a_request(self):
        record = logging.LogRecord("derra", logging.INFO, __file__, 1, "hello", None, None)

        assert RequestIdFilter().filter(record) is True
        assert record.request_id == "-"
