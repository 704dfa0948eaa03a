"""Rule-based exclusion of non-documentation pages."""

import re
from dataclasses import dataclass, field

from scout.models import PageMetadata

EXCLUDE_PATTERNS = [
    re.compile(r"privacy", re.IGNORECASE),
    re.compile(r"terms", re.IGNORECASE),
    re.compile(r"contact", re.IGNORECASE),
    re.compile(r"login", re.IGNORECASE),
    re.compile(r"sign-?up", re.IGNORECASE),
    re.compile(r"sign-?in", re.IGNORECASE),
    re.compile(r"404", re.IGNORECASE),
    re.compile(r"changelog", re.IGNORECASE),
    re.compile(r"release-notes", re.IGNORECASE),
    re.compile(r"contributing", re.IGNORECASE),
    re.compile(r"license", re.IGNORECASE),
    re.compile(r"cookie", re.IGNORECASE),
    re.compile(r"legal", re.IGNORECASE),
    re.compile(r"careers", re.IGNORECASE),
    re.compile(r"blog(?!/)", re.IGNORECASE),  # blog index, not posts
    re.compile(r"pricing", re.IGNORECASE),
    re.compile(r"support/ticket", re.IGNORECASE),
]


@dataclass
class PreFilterResult:
    """Pages that survived the rules and how many were dropped."""

    passed: list[PageMetadata] = field(default_factory=list)
    filtered_count: int = 0


def is_excluded(page: PageMetadata) -> bool:
    """Check a page against the exclusion patterns."""
    text = f"{page.url} {page.title} {page.path}"
    return any(pattern.search(text) for pattern in EXCLUDE_PATTERNS)


def pre_filter(pages: list[PageMetadata]) -> PreFilterResult:
    """Partition *pages* into passed pages and an excluded count, keeping order."""
    result = PreFilterResult()
    for page in pages:
        if is_excluded(page):
            result.filtered_count += 1
        else:
            result.passed.append(page)
    return result
