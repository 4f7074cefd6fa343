"""Translate OpenAI chat-completion requests to Ollama generate calls and back."""
import random
import string
import time

import structlog
from pydantic import ValidationError

from proxy.api.schemas import (
    ChatChoice,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    GenerateOptions,
    GenerateRequest,
    Usage,
)
from proxy.client import OllamaClient
from proxy.errors import InvalidRequestError, ProxyError
from proxy.metrics import CHAT_COMPLETIONS

logger = structlog.get_logger(__name__)

COMPLETION_ID_PREFIX = "chatcmpl-"
COMPLETION_ID_ALPHABET = string.ascii_letters + string.digits
COMPLETION_ID_LENGTH = 10
CHARS_PER_TOKEN = 4


def parse_chat_request(raw: bytes) -> ChatCompletionRequest:
    """Decode and validate the request body. Messages are checked before the model."""
    try:
        request = ChatCompletionRequest.model_validate_json(raw)
    except ValidationError as e:
        raise InvalidRequestError("Invalid request body") from e
    if not request.messages:
        raise InvalidRequestError("Messages array is empty", code="invalid_messages")
    if not request.model:
        raise InvalidRequestError("Model is required", code="invalid_model")
    return request


def flatten_messages(messages: list[ChatMessage]) -> str:
    """One "<role>: <content>" line per message, in order. Lossy: nothing is escaped."""
    return "".join(f"{m.role}: {m.content}\n" for m in messages)


def build_generate_request(request: ChatCompletionRequest, prompt: str) -> GenerateRequest:
    # Zero or negative sampling values mean "unset", same as absent.
    options = GenerateOptions()
    if request.temperature is not None and request.temperature > 0:
        options.temperature = request.temperature
    if request.max_tokens is not None and request.max_tokens > 0:
        options.num_predict = request.max_tokens
    return GenerateRequest(
        model=request.model or "",
        prompt=prompt,
        stream=False,
        options=options,
    )


def estimate_tokens(text: str) -> int:
    """Coarse 4-characters-per-token estimate, not a tokenizer count."""
    return len(text) // CHARS_PER_TOKEN


def new_completion_id() -> str:
    # Cosmetic only; never use as a token or key.
    suffix = "".join(random.choices(COMPLETION_ID_ALPHABET, k=COMPLETION_ID_LENGTH))
    return COMPLETION_ID_PREFIX + suffix


def build_chat_response(
    model: str,
    prompt: str,
    completion: str,
    created: int | None = None,
) -> ChatCompletionResponse:
    prompt_tokens = estimate_tokens(prompt)
    completion_tokens = estimate_tokens(completion)
    return ChatCompletionResponse(
        id=new_completion_id(),
        created=created if created is not None else int(time.time()),
        model=model,
        choices=[
            ChatChoice(
                index=0,
                message=ChatMessage(role="assistant", content=completion),
                finish_reason="stop",
            )
        ],
        usage=Usage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
    )


class ChatCompletionService:
    """Validate -> build generate request -> call Ollama -> build chat completion."""

    def __init__(self, ollama_client: OllamaClient) -> None:
        self._ollama = ollama_client

    async def complete(self, raw_body: bytes) -> ChatCompletionResponse:
        try:
            response = await self._complete(raw_body)
        except ProxyError as e:
            CHAT_COMPLETIONS.labels(outcome=e.code).inc()
            raise
        CHAT_COMPLETIONS.labels(outcome="ok").inc()
        return response

    async def _complete(self, raw_body: bytes) -> ChatCompletionResponse:
        try:
            request = parse_chat_request(raw_body)
        except InvalidRequestError as e:
            logger.warning("chat_completion_rejected", code=e.code, message=e.message)
            raise

        if request.stream:
            logger.warning(
                "stream_not_supported",
                model=request.model,
                msg="stream=true requested; returning a single complete response",
            )

        prompt = flatten_messages(request.messages or [])
        generate_request = build_generate_request(request, prompt)
        result = await self._ollama.generate(generate_request)

        response = build_chat_response(generate_request.model, prompt, result.response)
        logger.info(
            "chat_completion_done",
            model=response.model,
            prompt_tokens=response.usage.prompt_tokens,
            completion_tokens=response.usage.completion_tokens,
        )
        return response
