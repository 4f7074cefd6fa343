"""Wire schemas: OpenAI chat-completions in front, Ollama generate behind."""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Inbound bodies decode like plain JSON: no type coercion, no Infinity/NaN literals.
STRICT_JSON = ConfigDict(strict=True, allow_inf_nan=False)


class ChatMessage(BaseModel):
    model_config = STRICT_JSON

    role: str = ""
    content: str = ""


class ChatCompletionRequest(BaseModel):
    model_config = STRICT_JSON

    # model/messages may be missing or null; emptiness is reported with its own error code.
    model: str | None = None
    messages: list[ChatMessage] | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    stream: bool | None = Field(default=None, description="Accepted but not supported.")


class ChatChoice(BaseModel):
    index: int = 0
    message: ChatMessage
    finish_reason: Literal["stop"] = "stop"


class Usage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatCompletionResponse(BaseModel):
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: list[ChatChoice]
    usage: Usage


class GenerateOptions(BaseModel):
    temperature: float | None = None
    num_predict: int | None = None


class GenerateRequest(BaseModel):
    """Body for Ollama POST /api/generate."""

    model: str
    prompt: str
    stream: bool = False
    options: GenerateOptions = Field(default_factory=GenerateOptions)


class GenerateResponse(BaseModel):
    """Subset of the Ollama generate reply; timing and context fields are ignored."""

    model: str = ""
    response: str = ""
    done: bool = False


class ErrorDetail(BaseModel):
    message: str
    type: str
    code: str


class ErrorBody(BaseModel):
    error: ErrorDetail
