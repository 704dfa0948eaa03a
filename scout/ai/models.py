"""Data models for the AI scoring layer."""

from dataclasses import dataclass
from enum import StrEnum


class ProviderType(StrEnum):
    """Supported scoring providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    DEEPSEEK = "deepseek"
    OLLAMA = "ollama"


PROVIDER_MODELS: dict[ProviderType, list[str]] = {
    ProviderType.OPENAI: ["gpt-4o-mini", "gpt-4o"],
    ProviderType.ANTHROPIC: ["claude-3-5-haiku-20241022", "claude-3-5-sonnet-20241022"],
    ProviderType.GEMINI: ["gemini-2.0-flash", "gemini-2.0-pro"],
    ProviderType.DEEPSEEK: ["deepseek-chat", "deepseek-reasoner"],
    ProviderType.OLLAMA: ["llama3.2", "mistral", "qwen2.5"],
}

PROVIDER_ENDPOINTS: dict[ProviderType, str] = {
    ProviderType.OPENAI: "https://api.openai.com/v1",
    ProviderType.ANTHROPIC: "https://api.anthropic.com/v1",
    ProviderType.GEMINI: "https://generativelanguage.googleapis.com/v1beta",
    ProviderType.DEEPSEEK: "https://api.deepseek.com/v1",
    ProviderType.OLLAMA: "http://localhost:11434",
}


@dataclass
class ProviderConfig:
    """Configuration for a scoring provider."""

    name: str = ProviderType.OPENAI  # provider type value
    api_key: str = ""
    model: str = ""
    endpoint: str | None = None
    timeout_seconds: float = 60.0
    temperature: float = 0.2

    @property
    def resolved_model(self) -> str:
        """Configured model, or the provider's first default."""
        return self.model or PROVIDER_MODELS[ProviderType(self.name)][0]

    @property
    def base_url(self) -> str:
        """Endpoint without trailing slashes."""
        return (self.endpoint or PROVIDER_ENDPOINTS[ProviderType(self.name)]).rstrip("/")
