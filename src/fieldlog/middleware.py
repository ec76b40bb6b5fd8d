"""
fieldlog HTTP Middleware

FastAPI/Starlette middleware that resolves the request id for each incoming
request and logs the request itself.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .context import REQUEST_ID_HEADER, activate, add_to_context, current_context, request_id_from_header, tracing_context
from .logger import info_with_tracing


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that ensures every request carries an ``x-request-id``.

    This middleware:
    - Reuses the incoming header, truncated to UUID length, or generates one
    - Rewrites the request header so handlers see the resolved id
    - Activates a tracing context carrying the id for the request lifecycle
    - Echoes the id on the response
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Resolve the request id and run the rest of the chain with it active.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            HTTP response
        """
        request_id = request_id_from_header(request.headers)

        # Replace the header in the ASGI scope so downstream handlers see the resolved id
        header_name = REQUEST_ID_HEADER.encode("latin-1")
        headers = [(name, value) for name, value in request.scope["headers"] if name.lower() != header_name]
        headers.append((header_name, request_id.encode("latin-1")))
        request.scope["headers"] = headers

        with activate(add_to_context(current_context(), request_id)):
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestLogMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs each incoming request at the info level.

    Install it inside RequestIDMiddleware so the record carries the
    request's id.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Log method, path, query and body, then pass the request on.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            HTTP response
        """
        body = await request.body()

        info_with_tracing(tracing_context.get(), {
            "Method": request.method,
            "RequestPath": request.url.path,
            "RequestQuery": request.url.query,
            "RequestBody": body.decode("utf-8", errors="replace"),
        })

        return await call_next(request)
