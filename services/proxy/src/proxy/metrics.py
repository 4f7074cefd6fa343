"""Prometheus metrics for the proxy."""
from prometheus_client import Counter, Histogram

CHAT_COMPLETIONS = Counter(
    "proxy_chat_completions_total",
    "Chat completion requests by outcome (ok or error code).",
    ["outcome"],
)

BACKEND_LATENCY = Histogram(
    "proxy_backend_request_seconds",
    "Duration of Ollama /api/generate calls.",
)
