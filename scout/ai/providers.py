"""Scoring providers - unified interface over the supported AI backends."""

from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from gatekeeper.exceptions import (
    EmptyProviderResponseError,
    ProviderRequestError,
    UnknownProviderError,
)
from scout.ai.models import ProviderConfig, ProviderType
from scout.ai.prompt import build_scoring_prompt, parse_scored_pages
from scout.models import PageMetadata, ScoredPage

logger = structlog.get_logger(__name__)

ANTHROPIC_VERSION = "2023-06-01"

# Timeout for connection probes
PROBE_TIMEOUT_SECONDS = 10.0


def _dig(data: Any, *keys: str | int) -> Any:
    """Walk nested dicts/lists, returning None on any missing step."""
    for key in keys:
        try:
            data = data[key]
        except (KeyError, IndexError, TypeError):
            return None
    return data


class ScoringProvider(ABC):
    """Abstract base class for scoring providers."""

    provider_type: ProviderType
    name: str

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.transport = transport

    @abstractmethod
    async def test_connection(self) -> bool:
        """Check if the provider is reachable with the configured credentials."""
        ...

    @abstractmethod
    async def _complete(self, prompt: str) -> str:
        """Send *prompt* and return the reply text."""
        ...

    async def score_urls(
        self,
        issue_description: str,
        pages: list[PageMetadata],
    ) -> list[ScoredPage]:
        """
        Score one batch of pages against the issue description.

        Raises:
            ProviderRequestError: Transport failure or non-2xx response
            EmptyProviderResponseError: The reply carried no text

        Returns:
            Parsed scores; empty when the reply is not valid JSON
        """
        prompt = build_scoring_prompt(issue_description, pages)
        content = await self._complete(prompt)
        return parse_scored_pages(content, pages)

    def _client(self, timeout: float | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout if timeout is not None else self.config.timeout_seconds,
            transport=self.transport,
        )

    async def _post_json(
        self,
        url: str,
        payload: dict,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """POST *payload* and return the decoded JSON body."""
        try:
            async with self._client() as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json", **(headers or {})},
                    params=params,
                )
        except httpx.TimeoutException as e:
            raise ProviderRequestError(
                self.name,
                f"Request timed out after {self.config.timeout_seconds}s",
            ) from e
        except httpx.HTTPError as e:
            raise ProviderRequestError(self.name, str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.warning(
                "provider_api_error",
                provider=self.name,
                status=response.status_code,
                body=response.text[:200],
            )
            raise ProviderRequestError(
                self.name,
                f"API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderRequestError(self.name, "Response body is not JSON") from e

    async def _probe(self, method: str, url: str, **kwargs: Any) -> bool:
        """Return True when the request answers 2xx; never raises."""
        try:
            async with self._client(timeout=PROBE_TIMEOUT_SECONDS) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.info("provider_probe_failed", provider=self.name, error=str(e))
            return False
        return response.is_success


class OpenAIProvider(ScoringProvider):
    """OpenAI chat completions."""

    provider_type = ProviderType.OPENAI
    name = "OpenAI"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    async def test_connection(self) -> bool:
        return await self._probe(
            "GET",
            f"{self.config.base_url}/models",
            headers=self._auth_headers(),
        )

    async def _complete(self, prompt: str) -> str:
        data = await self._post_json(
            f"{self.config.base_url}/chat/completions",
            payload={
                "model": self.config.resolved_model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": self.config.temperature,
            },
            headers=self._auth_headers(),
        )
        content = _dig(data, "choices", 0, "message", "content")
        if not content:
            raise EmptyProviderResponseError(self.name)
        return str(content)


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek, which speaks the OpenAI chat completions protocol."""

    provider_type = ProviderType.DEEPSEEK
    name = "DeepSeek"


class AnthropicProvider(ScoringProvider):
    """Anthropic Messages API."""

    provider_type = ProviderType.ANTHROPIC
    name = "Anthropic"

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    async def test_connection(self) -> bool:
        return await self._probe(
            "POST",
            f"{self.config.base_url}/messages",
            headers={**self._headers(), "Content-Type": "application/json"},
            json={
                "model": self.config.resolved_model,
                "max_tokens": 64,
                "messages": [{"role": "user", "content": 'Reply with "ok"'}],
            },
        )

    async def _complete(self, prompt: str) -> str:
        data = await self._post_json(
            f"{self.config.base_url}/messages",
            payload={
                "model": self.config.resolved_model,
                "max_tokens": 4096,
                "messages": [{"role": "user", "content": prompt}],
            },
            headers=self._headers(),
        )
        content = _dig(data, "content", 0, "text")
        if not content:
            raise EmptyProviderResponseError(self.name)
        return str(content)


class GeminiProvider(ScoringProvider):
    """Google Gemini generateContent."""

    provider_type = ProviderType.GEMINI
    name = "Gemini"

    async def test_connection(self) -> bool:
        return await self._probe(
            "GET",
            f"{self.config.base_url}/models",
            params={"key": self.config.api_key},
        )

    async def _complete(self, prompt: str) -> str:
        data = await self._post_json(
            f"{self.config.base_url}/models/{self.config.resolved_model}:generateContent",
            payload={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {"responseMimeType": "application/json"},
            },
            params={"key": self.config.api_key},
        )
        content = _dig(data, "candidates", 0, "content", "parts", 0, "text")
        if not content:
            raise EmptyProviderResponseError(self.name)
        return str(content)


class OllamaProvider(ScoringProvider):
    """Local Ollama server."""

    provider_type = ProviderType.OLLAMA
    name = "Ollama"

    async def test_connection(self) -> bool:
        return await self._probe("GET", f"{self.config.base_url}/api/tags")

    async def _complete(self, prompt: str) -> str:
        data = await self._post_json(
            f"{self.config.base_url}/api/chat",
            payload={
                "model": self.config.resolved_model,
                "messages": [{"role": "user", "content": prompt}],
                "format": "json",
                "stream": False,
            },
        )
        content = _dig(data, "message", "content")
        if not content:
            raise EmptyProviderResponseError(self.name)
        return str(content)


_PROVIDERS: dict[ProviderType, type[ScoringProvider]] = {
    ProviderType.OPENAI: OpenAIProvider,
    ProviderType.ANTHROPIC: AnthropicProvider,
    ProviderType.GEMINI: GeminiProvider,
    ProviderType.DEEPSEEK: DeepSeekProvider,
    ProviderType.OLLAMA: OllamaProvider,
}


def create_scoring_provider(
    config: ProviderConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ScoringProvider:
    """Factory function to get a scoring provider."""
    try:
        provider_type = ProviderType(config.name)
    except ValueError as e:
        raise UnknownProviderError(str(config.name)) from e

    provider_class = _PROVIDERS[provider_type]
    return provider_class(config, transport=transport)
