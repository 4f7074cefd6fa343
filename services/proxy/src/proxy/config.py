"""Proxy service configuration."""
from pydantic_settings import SettingsConfigDict

from shared.config import BaseAppSettings


class ProxySettings(BaseAppSettings):
    model_config = SettingsConfigDict(env_prefix="PROXY_")

    host: str = "0.0.0.0"
    port: int = 8080
    backend_url: str = "http://localhost:11434"
    backend_timeout_seconds: float = 120.0
    readiness_timeout_seconds: float = 5.0
    json_logs: bool = True
