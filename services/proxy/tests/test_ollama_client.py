"""Tests for the Ollama HTTP client against a mocked transport."""
import json
import math
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
import pytest

from shared.http_client import create_http_client

from proxy.api.schemas import GenerateOptions, GenerateRequest
from proxy.client import OllamaClient
from proxy.errors import BackendError


@asynccontextmanager
async def _client(handler) -> AsyncIterator[OllamaClient]:
    transport = httpx.MockTransport(handler)
    async with create_http_client("http://ollama:11434/", timeout=5.0, transport=transport) as http:
        yield OllamaClient(http, readiness_timeout=1.0)


@pytest.mark.asyncio
async def test_generate_posts_payload_and_parses_reply() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"model": "llama2", "response": "Hello", "done": True, "eval_count": 3},
        )

    async with _client(handler) as client:
        result = await client.generate(
            GenerateRequest(model="llama2", prompt="user: Hi\n", options=GenerateOptions(num_predict=16))
        )

    assert result.response == "Hello"
    assert result.done is True
    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/generate"
    assert json.loads(seen[0].content) == {
        "model": "llama2",
        "prompt": "user: Hi\n",
        "stream": False,
        "options": {"num_predict": 16},
    }


@pytest.mark.asyncio
async def test_generate_non_success_status_includes_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text='{"error":"model \'nope\' not found"}')

    async with _client(handler) as client:
        with pytest.raises(BackendError) as exc_info:
            await client.generate(GenerateRequest(model="nope", prompt="p"))

    assert "status 404" in exc_info.value.message
    assert "model 'nope' not found" in exc_info.value.message


@pytest.mark.asyncio
async def test_generate_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(BackendError) as exc_info:
            await client.generate(GenerateRequest(model="llama2", prompt="p"))

    assert "failed to connect to Ollama" in exc_info.value.message
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_generate_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with _client(handler) as client:
        with pytest.raises(BackendError) as exc_info:
            await client.generate(GenerateRequest(model="llama2", prompt="p"))

    assert "timed out" in exc_info.value.message


@pytest.mark.asyncio
async def test_generate_unencodable_payload_is_backend_error() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"response": "unreachable"})

    async with _client(handler) as client:
        with pytest.raises(BackendError) as exc_info:
            await client.generate(
                GenerateRequest(model="llama2", prompt="p", options=GenerateOptions(temperature=math.inf))
            )

    assert exc_info.value.code == "internal_error"
    assert "failed to marshal request" in exc_info.value.message
    assert seen == []


@pytest.mark.asyncio
async def test_generate_unparseable_reply() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>proxy error</html>")

    async with _client(handler) as client:
        with pytest.raises(BackendError) as exc_info:
            await client.generate(GenerateRequest(model="llama2", prompt="p"))

    assert "failed to parse response" in exc_info.value.message


@pytest.mark.asyncio
async def test_ping() -> None:
    def up(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/tags"
        return httpx.Response(200, json={"models": []})

    def down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(up) as client:
        assert await client.ping() is True
    async with _client(down) as client:
        assert await client.ping() is False
