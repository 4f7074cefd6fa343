"""HTTP client for the Ollama generate API."""
import httpx
import structlog
from pydantic import ValidationError

from proxy.api.schemas import GenerateRequest, GenerateResponse
from proxy.errors import BackendError
from proxy.metrics import BACKEND_LATENCY

logger = structlog.get_logger(__name__)


class OllamaClient:
    def __init__(self, http_client: httpx.AsyncClient, readiness_timeout: float = 5.0) -> None:
        self._http = http_client
        self._readiness_timeout = readiness_timeout

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Single POST /api/generate; every failure is raised as BackendError."""
        payload = request.model_dump(exclude_none=True)
        logger.debug("ollama_request", model=request.model, prompt_chars=len(request.prompt))
        try:
            with BACKEND_LATENCY.time():
                resp = await self._http.post("/api/generate", json=payload)
        except httpx.TimeoutException as e:
            logger.error("ollama_error", reason="timeout", error=str(e))
            raise BackendError(f"request to Ollama timed out: {e!r}") from e
        except httpx.HTTPError as e:
            logger.error("ollama_error", reason="transport", error=str(e))
            raise BackendError(f"failed to connect to Ollama: {e}") from e
        except (TypeError, ValueError) as e:
            logger.error("ollama_error", reason="encode", error=str(e))
            raise BackendError(f"failed to marshal request: {e}") from e

        if not resp.is_success:
            logger.error("ollama_error", reason="status", status=resp.status_code)
            raise BackendError(f"ollama API error (status {resp.status_code}): {resp.text}")

        try:
            return GenerateResponse.model_validate_json(resp.content)
        except ValidationError as e:
            logger.error("ollama_error", reason="parse", error=str(e))
            raise BackendError(f"failed to parse response: {e}") from e

    async def ping(self) -> bool:
        """Check that Ollama answers GET /api/tags."""
        try:
            resp = await self._http.get("/api/tags", timeout=self._readiness_timeout)
        except httpx.HTTPError:
            return False
        return resp.status_code == 200
