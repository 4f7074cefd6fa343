"""Exception handlers rendering errors as OpenAI-style error bodies."""
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from proxy.errors import MethodNotAllowedError, ProxyError


def error_response(exc: ProxyError, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body().model_dump(),
        headers=headers,
    )


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    return error_response(exc)


async def router_http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """Wrong method on a known route becomes method_not_allowed; the rest stay stock."""
    if exc.status_code == 405:
        return error_response(MethodNotAllowedError(), headers=exc.headers)
    return await http_exception_handler(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(StarletteHTTPException, router_http_exception_handler)
