"""
Integration tests for the HTTP middleware.

Runs a minimal FastAPI app through httpx's ASGI transport.
"""

import re

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from fieldlog import REQUEST_ID_HEADER, current_context, from_context, tracing_context
from fieldlog.middleware import RequestIDMiddleware, RequestLogMiddleware

UUID4_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


def create_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLogMiddleware)
    # Added last so it runs first
    app.add_middleware(RequestIDMiddleware)

    @app.post("/echo")
    async def echo(request: Request):
        ctx = tracing_context.get()
        assert ctx is not None
        return {
            "header": request.headers.get(REQUEST_ID_HEADER),
            "context": from_context(current_context())[1],
        }

    return app


@pytest.mark.asyncio
async def test_existing_request_id_is_propagated(configure_sink, read_records):
    configure_sink("Debug")

    async with AsyncClient(transport=ASGITransport(app=create_app()), base_url="http://test") as client:
        response = await client.post("/echo?dry=1", content=b"payload", headers={"X-Request-ID": "test-request-789"})

    assert response.status_code == 200
    assert response.json() == {"header": "test-request-789", "context": "test-request-789"}
    assert response.headers[REQUEST_ID_HEADER] == "test-request-789"

    record = read_records()[0]
    assert record["request_id"] == "test-request-789"
    assert record["Method"] == "POST"
    assert record["RequestPath"] == "/echo"
    assert record["RequestQuery"] == "dry=1"
    assert record["RequestBody"] == "payload"
    assert record["severity"] == "info"


@pytest.mark.asyncio
async def test_long_request_id_is_truncated(configure_sink):
    configure_sink("Error")
    request_id = "r" * 50

    async with AsyncClient(transport=ASGITransport(app=create_app()), base_url="http://test") as client:
        response = await client.post("/echo", headers={REQUEST_ID_HEADER: request_id})

    assert response.json()["header"] == request_id[:36]
    assert response.json()["context"] == request_id[:36]
    assert response.headers[REQUEST_ID_HEADER] == request_id[:36]


@pytest.mark.asyncio
async def test_missing_request_id_is_generated(configure_sink):
    configure_sink("Error")

    async with AsyncClient(transport=ASGITransport(app=create_app()), base_url="http://test") as client:
        response = await client.post("/echo")

    data = response.json()
    assert UUID4_PATTERN.match(data["header"])
    assert data["context"] == data["header"]
    assert response.headers[REQUEST_ID_HEADER] == data["header"]

    # Context does not leak out of the request
    assert tracing_context.get() is None
