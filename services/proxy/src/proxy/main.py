"""Proxy service entrypoint - OpenAI chat-completions in front of Ollama."""
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request
from prometheus_client import make_asgi_app

from shared.http_client import create_http_client
from shared.logging import configure_logging
from shared.middleware import CORSHeadersMiddleware, RequestIdMiddleware
from shared.schemas import HealthResponse

from proxy.api.handlers import register_exception_handlers
from proxy.api.routes import CHAT_COMPLETIONS_PATH, router
from proxy.client import OllamaClient
from proxy.config import ProxySettings
from proxy.service import ChatCompletionService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: ProxySettings = app.state.settings
    http_client = create_http_client(
        settings.backend_url,
        timeout=settings.backend_timeout_seconds,
        transport=app.state.backend_transport,
    )
    ollama_client = OllamaClient(http_client, readiness_timeout=settings.readiness_timeout_seconds)
    app.state.ollama_client = ollama_client
    app.state.chat_service = ChatCompletionService(ollama_client)
    try:
        yield
    finally:
        await http_client.aclose()


def create_app(
    settings: ProxySettings | None = None,
    backend_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the app. backend_transport replaces the network transport to Ollama (tests)."""
    settings = settings or ProxySettings()
    configure_logging(json_logs=settings.json_logs)
    app = FastAPI(title="Ollama OpenAI Proxy", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.backend_transport = backend_transport

    # Last added runs first: request ids are bound before CORS short-circuits OPTIONS.
    app.add_middleware(CORSHeadersMiddleware, paths=[CHAT_COMPLETIONS_PATH])
    app.add_middleware(RequestIdMiddleware)
    register_exception_handlers(app)

    app.include_router(router)

    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    @app.get("/healthz", response_model=HealthResponse)
    async def healthz() -> HealthResponse:
        return HealthResponse(status="ok", service="proxy")

    @app.get("/readyz", response_model=HealthResponse)
    async def readyz(request: Request) -> HealthResponse:
        if not await request.app.state.ollama_client.ping():
            return HealthResponse(status="unhealthy", service="proxy")
        return HealthResponse(status="ok", service="proxy")

    return app


def main() -> None:
    import uvicorn

    settings = ProxySettings()
    app = create_app(settings)
    structlog.get_logger(__name__).info(
        "proxy_starting",
        host=settings.host,
        port=settings.port,
        backend_url=settings.backend_url,
    )
    uvicorn.run(app, host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
    main()
