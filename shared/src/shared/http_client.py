"""Async HTTP client factory for upstream services."""
import httpx


def create_http_client(
    base_url: str,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create async HTTP client bound to base_url. No retries: one attempt per call."""
    if transport is None:
        transport = httpx.AsyncHTTPTransport(retries=0)
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=httpx.Timeout(timeout),
        transport=transport,
    )
