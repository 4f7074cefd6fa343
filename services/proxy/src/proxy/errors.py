"""Errors surfaced to callers as an OpenAI-style error body."""
from proxy.api.schemas import ErrorBody, ErrorDetail

INVALID_REQUEST_ERROR = "invalid_request_error"
SERVER_ERROR = "server_error"


class ProxyError(Exception):
    """Base error: carries everything needed to render the error body."""

    error_type: str = SERVER_ERROR
    code: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_body(self) -> ErrorBody:
        return ErrorBody(
            error=ErrorDetail(message=self.message, type=self.error_type, code=self.code)
        )


class InvalidRequestError(ProxyError):
    """Client-caused: malformed body, empty messages, empty model."""

    error_type = INVALID_REQUEST_ERROR
    code = "invalid_body"
    status_code = 400


class MethodNotAllowedError(InvalidRequestError):
    code = "method_not_allowed"
    status_code = 405

    def __init__(self, message: str = "Method not allowed") -> None:
        super().__init__(message)


class BackendError(ProxyError):
    """Ollama unreachable, timed out, non-2xx, or returned something unparseable."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Error calling Ollama API: {detail}")
