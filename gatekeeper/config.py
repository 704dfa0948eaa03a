"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from scout.ai.models import ProviderConfig, ProviderType
from scout.crawler.crawler import CrawlConfig
from scout.filtering.scorer import ScoringConfig


class AIProviderSettings(BaseModel):
    """Provider selection handed to an analysis."""

    name: str = ProviderType.OPENAI.value  # checked by the provider factory
    api_key: str = ""
    model: str = ""
    endpoint: str | None = None


class AnalysisSettings(BaseModel):
    """Per-analysis settings read when a request starts."""

    ai_provider: AIProviderSettings = Field(default_factory=AIProviderSettings)
    max_urls_to_crawl: int = Field(default=200, ge=1)
    max_results_to_return: int = Field(default=15, ge=1)
    ai_timeout_seconds: float = Field(default=60.0, gt=0)

    def provider_config(self) -> ProviderConfig:
        """Build the adapter configuration."""
        return ProviderConfig(
            name=self.ai_provider.name,
            api_key=self.ai_provider.api_key,
            model=self.ai_provider.model,
            endpoint=self.ai_provider.endpoint or None,
            timeout_seconds=self.ai_timeout_seconds,
        )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["development", "production", "test"] = "development"
    log_level: str = "INFO"

    # AI provider
    ai_provider: ProviderType = ProviderType.OPENAI
    ai_api_key: str = ""
    ai_model: str = ""  # empty = provider default
    ai_endpoint: str | None = None
    ai_timeout_seconds: float = Field(default=60.0, gt=0)

    # Result limits
    max_urls_to_crawl: int = Field(default=200, ge=1)
    max_results_to_return: int = Field(default=15, ge=1)

    # Crawler
    crawler_max_depth: int = Field(default=2, ge=1)
    crawler_max_concurrent: int = Field(default=5, ge=1)
    crawler_request_delay: float = Field(default=0.2, ge=0)  # seconds between levels
    crawler_timeout: float = Field(default=10.0, gt=0)
    crawler_user_agent: str = "DocGatekeeperBot/1.0"
    crawler_fetch_retries: int = Field(default=0, ge=0)

    # Scoring
    scoring_batch_size: int = Field(default=20, ge=1)
    scoring_max_retries: int = Field(default=3, ge=1)
    scoring_retry_base_delay: float = Field(default=1.0, ge=0)
    scoring_backoff: Literal["linear", "exponential"] = "linear"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"

    def analysis_settings(self) -> AnalysisSettings:
        """Settings snapshot for one analysis."""
        return AnalysisSettings(
            ai_provider=AIProviderSettings(
                name=self.ai_provider.value,
                api_key=self.ai_api_key,
                model=self.ai_model,
                endpoint=self.ai_endpoint,
            ),
            max_urls_to_crawl=self.max_urls_to_crawl,
            max_results_to_return=self.max_results_to_return,
            ai_timeout_seconds=self.ai_timeout_seconds,
        )

    def crawl_config(self, max_urls: int | None = None) -> CrawlConfig:
        """Crawler limits, optionally overriding the URL cap."""
        return CrawlConfig(
            max_urls=max_urls if max_urls is not None else self.max_urls_to_crawl,
            max_depth=self.crawler_max_depth,
            max_concurrent=self.crawler_max_concurrent,
            request_delay=self.crawler_request_delay,
            timeout=self.crawler_timeout,
            user_agent=self.crawler_user_agent,
            fetch_retries=self.crawler_fetch_retries,
        )

    def scoring_config(self) -> ScoringConfig:
        """Batching and retry policy for the AI scorer."""
        return ScoringConfig(
            batch_size=self.scoring_batch_size,
            max_retries=self.scoring_max_retries,
            retry_base_delay=self.scoring_retry_base_delay,
            backoff=self.scoring_backoff,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
