from proxy.client.ollama_client import OllamaClient

__all__ = ["OllamaClient"]
