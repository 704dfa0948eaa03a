"""Data models shared by the crawl and filter stages."""

from dataclasses import dataclass, field
from enum import StrEnum


class PageCategory(StrEnum):
    """Documentation type assigned by the AI judge."""

    TUTORIAL = "tutorial"
    REFERENCE = "reference"
    CONCEPT = "concept"
    EXAMPLE = "example"


class DiscoveryMethod(StrEnum):
    """How the pages of a crawl were discovered."""

    SITEMAP = "sitemap"
    DOM_PARSING = "dom-parsing"


@dataclass(frozen=True)
class PageMetadata:
    """A discovered documentation page."""

    url: str
    title: str = ""
    description: str = ""
    path: str = ""
    section: str = "root"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "path": self.path,
            "section": self.section,
        }


@dataclass(frozen=True)
class ScoredPage(PageMetadata):
    """A page with the relevance verdict of the AI judge."""

    relevance: float = 0.0  # 0-10
    category: PageCategory = PageCategory.REFERENCE
    reason: str = ""

    @classmethod
    def unscored(cls, page: PageMetadata, reason: str) -> "ScoredPage":
        """Zero-relevance placeholder for a page the AI could not score."""
        return cls(
            url=page.url,
            title=page.title,
            description=page.description,
            path=page.path,
            section=page.section,
            relevance=0.0,
            category=PageCategory.REFERENCE,
            reason=reason,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            **super().to_dict(),
            "relevance": self.relevance,
            "category": self.category.value,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class BatchProgress:
    """Running counter attached to each streamed result."""

    current: int
    total: int

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"current": self.current, "total": self.total}


@dataclass
class CrawlOutcome:
    """Result of one discovery run."""

    base_url: str
    discovery_method: DiscoveryMethod
    pages: list[PageMetadata] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def total_found(self) -> int:
        """Number of unique pages discovered."""
        return len(self.pages)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "base_url": self.base_url,
            "discovery_method": self.discovery_method.value,
            "total_found": self.total_found,
            "pages": [p.to_dict() for p in self.pages],
            "errors": list(self.errors),
            "duration_ms": self.duration_ms,
        }


@dataclass
class FilterOutcome:
    """Terminal artifact of the filter pipeline."""

    issue_description: str
    total_scanned: int
    pre_filtered: int
    ai_scored: int
    results: list[ScoredPage]
    provider_name: str
    duration_ms: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "issue_description": self.issue_description,
            "total_scanned": self.total_scanned,
            "pre_filtered": self.pre_filtered,
            "ai_scored": self.ai_scored,
            "results": [r.to_dict() for r in self.results],
            "provider_name": self.provider_name,
            "duration_ms": self.duration_ms,
        }
