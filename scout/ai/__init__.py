"""AI scoring layer.

This package provides a unified interface over the supported AI
backends (OpenAI, Anthropic, Gemini, DeepSeek, Ollama) for judging the
relevance of documentation pages to an issue description.

Use explicit imports:
    from scout.ai.providers import ScoringProvider, create_scoring_provider
    from scout.ai.models import ProviderConfig, ProviderType
    from scout.ai.prompt import build_scoring_prompt, parse_scored_pages
"""

__all__ = [
    # Providers
    "ScoringProvider",
    "create_scoring_provider",
    # Models
    "ProviderConfig",
    "ProviderType",
    # Prompt
    "build_scoring_prompt",
    "parse_scored_pages",
]
