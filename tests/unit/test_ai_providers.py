"""Tests for AI scoring providers."""

import json

import httpx
import pytest

from gatekeeper.exceptions import (
    EmptyProviderResponseError,
    ProviderRequestError,
    UnknownProviderError,
)
from scout.ai.models import ProviderConfig, ProviderType
from scout.ai.providers import (
    AnthropicProvider,
    DeepSeekProvider,
    GeminiProvider,
    OllamaProvider,
    OpenAIProvider,
    create_scoring_provider,
)
from scout.models import PageMetadata

PAGES = [PageMetadata(url="https://example.com/docs/auth", title="Auth", path="/docs/auth")]

SCORES = json.dumps(
    [{"url": "https://example.com/docs/auth", "relevance": 8, "category": "tutorial"}]
)


class Recorder:
    """MockTransport handler that records requests and replies with a fixed body."""

    def __init__(self, body: dict | None = None, status: int = 200):
        self.body = body or {}
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json=self.body)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class TestProviderConfig:
    """Tests for ProviderConfig."""

    def test_default_model_and_endpoint(self) -> None:
        """Falls back to provider defaults."""
        config = ProviderConfig(name=ProviderType.ANTHROPIC)

        assert config.resolved_model.startswith("claude")
        assert config.base_url == "https://api.anthropic.com/v1"

    def test_custom_endpoint_trimmed(self) -> None:
        """Custom endpoints lose trailing slashes."""
        config = ProviderConfig(name=ProviderType.OLLAMA, endpoint="http://gpu-box:11434/")

        assert config.base_url == "http://gpu-box:11434"


class TestCreateScoringProvider:
    """Tests for the provider factory."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("openai", OpenAIProvider),
            ("anthropic", AnthropicProvider),
            ("gemini", GeminiProvider),
            ("deepseek", DeepSeekProvider),
            ("ollama", OllamaProvider),
        ],
    )
    def test_known_providers(self, name: str, expected: type) -> None:
        """Each provider name maps to its class."""
        provider = create_scoring_provider(ProviderConfig(name=name))

        assert type(provider) is expected

    def test_unknown_provider(self) -> None:
        """Unknown names raise."""
        with pytest.raises(UnknownProviderError) as exc_info:
            create_scoring_provider(ProviderConfig(name="mistral"))

        assert exc_info.value.code == "unknown_provider"


class TestOpenAIProvider:
    """Tests for the OpenAI adapter."""

    @pytest.mark.asyncio
    async def test_score_urls(self) -> None:
        """Posts a chat completion and parses the reply."""
        recorder = Recorder({"choices": [{"message": {"content": SCORES}}]})
        provider = OpenAIProvider(
            ProviderConfig(name=ProviderType.OPENAI, api_key="sk-test", model="gpt-4o-mini"),
            transport=recorder.transport(),
        )

        scored = await provider.score_urls("login fails", PAGES)

        request = recorder.requests[0]
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert recorder.last_json["model"] == "gpt-4o-mini"
        assert "login fails" in recorder.last_json["messages"][0]["content"]
        assert scored[0].relevance == 8.0
        assert scored[0].title == "Auth"

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self) -> None:
        """API errors raise ProviderRequestError with the status."""
        recorder = Recorder({"error": "rate limited"}, status=429)
        provider = OpenAIProvider(ProviderConfig(api_key="k"), transport=recorder.transport())

        with pytest.raises(ProviderRequestError) as exc_info:
            await provider.score_urls("x", PAGES)

        assert exc_info.value.status_code == 429
        assert "429" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self) -> None:
        """A reply without text raises."""
        recorder = Recorder({"choices": []})
        provider = OpenAIProvider(ProviderConfig(api_key="k"), transport=recorder.transport())

        with pytest.raises(EmptyProviderResponseError):
            await provider.score_urls("x", PAGES)

    @pytest.mark.asyncio
    async def test_transport_error_raises(self) -> None:
        """Network failures raise ProviderRequestError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route to host")

        provider = OpenAIProvider(
            ProviderConfig(api_key="k"), transport=httpx.MockTransport(handler)
        )

        with pytest.raises(ProviderRequestError, match="no route to host"):
            await provider.score_urls("x", PAGES)

    @pytest.mark.asyncio
    async def test_timeout_raises(self) -> None:
        """Timeouts raise ProviderRequestError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out")

        provider = OpenAIProvider(
            ProviderConfig(api_key="k", timeout_seconds=5), transport=httpx.MockTransport(handler)
        )

        with pytest.raises(ProviderRequestError, match="timed out after 5"):
            await provider.score_urls("x", PAGES)

    @pytest.mark.asyncio
    async def test_malformed_content_is_empty(self) -> None:
        """Unparsable model text yields no scores rather than an error."""
        recorder = Recorder({"choices": [{"message": {"content": "I cannot help with that"}}]})
        provider = OpenAIProvider(ProviderConfig(api_key="k"), transport=recorder.transport())

        assert await provider.score_urls("x", PAGES) == []

    @pytest.mark.asyncio
    async def test_connection(self) -> None:
        """Connection probe lists models."""
        recorder = Recorder({"data": []})
        provider = OpenAIProvider(ProviderConfig(api_key="k"), transport=recorder.transport())

        assert await provider.test_connection() is True
        assert recorder.requests[0].method == "GET"
        assert str(recorder.requests[0].url) == "https://api.openai.com/v1/models"

    @pytest.mark.asyncio
    async def test_connection_failure(self) -> None:
        """A rejected key reports False."""
        recorder = Recorder({"error": "bad key"}, status=401)
        provider = OpenAIProvider(ProviderConfig(api_key="bad"), transport=recorder.transport())

        assert await provider.test_connection() is False


class TestDeepSeekProvider:
    """Tests for the DeepSeek adapter."""

    @pytest.mark.asyncio
    async def test_uses_deepseek_endpoint(self) -> None:
        """Speaks the OpenAI protocol against DeepSeek."""
        recorder = Recorder({"choices": [{"message": {"content": SCORES}}]})
        provider = DeepSeekProvider(
            ProviderConfig(name=ProviderType.DEEPSEEK, api_key="k"),
            transport=recorder.transport(),
        )

        scored = await provider.score_urls("x", PAGES)

        assert str(recorder.requests[0].url) == "https://api.deepseek.com/v1/chat/completions"
        assert recorder.last_json["model"] == "deepseek-chat"
        assert len(scored) == 1


class TestAnthropicProvider:
    """Tests for the Anthropic adapter."""

    @pytest.mark.asyncio
    async def test_score_urls(self) -> None:
        """Posts to the Messages API with Anthropic headers."""
        recorder = Recorder({"content": [{"type": "text", "text": SCORES}]})
        provider = AnthropicProvider(
            ProviderConfig(name=ProviderType.ANTHROPIC, api_key="ant-key"),
            transport=recorder.transport(),
        )

        scored = await provider.score_urls("x", PAGES)

        request = recorder.requests[0]
        assert str(request.url) == "https://api.anthropic.com/v1/messages"
        assert request.headers["x-api-key"] == "ant-key"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert recorder.last_json["max_tokens"] == 4096
        assert scored[0].relevance == 8.0

    @pytest.mark.asyncio
    async def test_connection(self) -> None:
        """Connection probe sends a tiny message."""
        recorder = Recorder({"content": [{"type": "text", "text": "ok"}]})
        provider = AnthropicProvider(
            ProviderConfig(name=ProviderType.ANTHROPIC, api_key="k"),
            transport=recorder.transport(),
        )

        assert await provider.test_connection() is True
        assert recorder.requests[0].method == "POST"


class TestGeminiProvider:
    """Tests for the Gemini adapter."""

    @pytest.mark.asyncio
    async def test_score_urls(self) -> None:
        """Posts generateContent with the key as a query parameter."""
        recorder = Recorder({"candidates": [{"content": {"parts": [{"text": SCORES}]}}]})
        provider = GeminiProvider(
            ProviderConfig(name=ProviderType.GEMINI, api_key="g-key", model="gemini-2.0-flash"),
            transport=recorder.transport(),
        )

        scored = await provider.score_urls("x", PAGES)

        url = recorder.requests[0].url
        assert url.path == "/v1beta/models/gemini-2.0-flash:generateContent"
        assert url.params["key"] == "g-key"
        assert recorder.last_json["generationConfig"]["responseMimeType"] == "application/json"
        assert scored[0].relevance == 8.0

    @pytest.mark.asyncio
    async def test_empty_candidates_raises(self) -> None:
        """A reply without candidates raises."""
        recorder = Recorder({"candidates": []})
        provider = GeminiProvider(
            ProviderConfig(name=ProviderType.GEMINI, api_key="k"),
            transport=recorder.transport(),
        )

        with pytest.raises(EmptyProviderResponseError):
            await provider.score_urls("x", PAGES)


class TestOllamaProvider:
    """Tests for the Ollama adapter."""

    @pytest.mark.asyncio
    async def test_score_urls(self) -> None:
        """Posts a non-streaming chat request in JSON mode."""
        recorder = Recorder({"message": {"role": "assistant", "content": SCORES}})
        provider = OllamaProvider(
            ProviderConfig(name=ProviderType.OLLAMA, model="llama3.2"),
            transport=recorder.transport(),
        )

        scored = await provider.score_urls("x", PAGES)

        assert str(recorder.requests[0].url) == "http://localhost:11434/api/chat"
        assert recorder.last_json["stream"] is False
        assert recorder.last_json["format"] == "json"
        assert "Authorization" not in recorder.requests[0].headers
        assert scored[0].relevance == 8.0

    @pytest.mark.asyncio
    async def test_connection_unreachable(self) -> None:
        """An unreachable server reports False instead of raising."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        provider = OllamaProvider(
            ProviderConfig(name=ProviderType.OLLAMA), transport=httpx.MockTransport(handler)
        )

        assert await provider.test_connection() is False
