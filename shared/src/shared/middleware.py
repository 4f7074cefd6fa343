"""FastAPI middleware: request_id/trace_id correlation and permissive CORS."""
import uuid
from typing import Callable, Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from shared.logging import clear_request_context, set_request_context

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "3600",
}


def get_request_id_from_headers(request: Request) -> str | None:
    """Extract X-Request-ID from request headers."""
    return request.headers.get("X-Request-ID")


def get_trace_id_from_headers(request: Request) -> str | None:
    """Extract X-Trace-ID from request headers."""
    return request.headers.get("X-Trace-ID")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Add request_id and trace_id to context and response headers."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id_from_headers(request) or str(uuid.uuid4())
        trace_id = get_trace_id_from_headers(request) or request_id
        set_request_context(request_id=request_id, trace_id=trace_id)
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Trace-ID"] = trace_id
            return response
        finally:
            clear_request_context()


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp CORS headers on responses for `paths`; OPTIONS there is answered with an empty 200.

    Unlike starlette's CORSMiddleware this does not require an Origin header on
    preflight, so plain OPTIONS probes from CLI tools get the same answer.
    Other paths pass through untouched.
    """

    def __init__(self, app: ASGIApp, paths: Iterable[str]) -> None:
        super().__init__(app)
        self.paths = frozenset(paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path not in self.paths:
            return await call_next(request)
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
