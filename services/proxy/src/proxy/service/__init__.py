from proxy.service.translator import ChatCompletionService

__all__ = ["ChatCompletionService"]
