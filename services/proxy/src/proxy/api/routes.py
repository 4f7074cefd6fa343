"""Proxy API routes."""
from fastapi import APIRouter, Request

from proxy.api.schemas import ChatCompletionResponse

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"

router = APIRouter(tags=["chat"])


@router.post(CHAT_COMPLETIONS_PATH, response_model=ChatCompletionResponse)
async def chat_completions(request: Request) -> ChatCompletionResponse:
    # Body is parsed by the service so malformed JSON maps to invalid_body, not a 422.
    service = request.app.state.chat_service
    raw = await request.body()
    return await service.complete(raw)
