"""Markdown report of a filter run."""

from datetime import datetime

from scout.models import FilterOutcome, PageCategory, ScoredPage

CATEGORY_ORDER = [
    PageCategory.TUTORIAL,
    PageCategory.CONCEPT,
    PageCategory.REFERENCE,
    PageCategory.EXAMPLE,
]

CATEGORY_HEADINGS = {
    PageCategory.TUTORIAL: "📚 Tutorials",
    PageCategory.CONCEPT: "💡 Concepts",
    PageCategory.REFERENCE: "📖 Reference",
    PageCategory.EXAMPLE: "🧪 Examples",
}


def _format_relevance(value: float) -> str:
    return f"{value:g}"


def _format_item(index: int, page: ScoredPage) -> list[str]:
    label = page.title or page.url
    return [
        f"{index}. [{label}]({page.url}) ⭐ {_format_relevance(page.relevance)}/10",
        f"   - {page.reason}",
    ]


def format_as_markdown(
    outcome: FilterOutcome,
    base_url: str,
    generated_at: datetime | None = None,
) -> str:
    """Render *outcome* as a markdown document grouped by category."""
    generated_at = generated_at or datetime.now()

    lines = [
        "# Documentation for your issue",
        "",
        f"**Issue:** {outcome.issue_description}",
        f"**Source:** {base_url}",
        f"**Generated:** {generated_at.strftime('%Y-%m-%d %H:%M')}",
        f"**Provider:** {outcome.provider_name}",
        "",
    ]

    grouped: dict[PageCategory, list[ScoredPage]] = {c: [] for c in CATEGORY_ORDER}
    for page in outcome.results:
        grouped.setdefault(page.category, []).append(page)

    if not outcome.results:
        lines += ["_No relevant pages found._", ""]

    for category in CATEGORY_ORDER:
        pages = grouped[category]
        if not pages:
            continue
        lines += [f"## {CATEGORY_HEADINGS[category]}", ""]
        for index, page in enumerate(pages, start=1):
            lines += _format_item(index, page)
        lines.append("")

    lines += [
        "---",
        "",
        "## Summary",
        "",
        f"- Pages scanned: {outcome.total_scanned}",
        f"- Pre-filtered: {outcome.pre_filtered}",
        f"- AI scored: {outcome.ai_scored}",
        f"- Relevant results: {len(outcome.results)}",
    ]
    for category in CATEGORY_ORDER:
        lines.append(f"- {category.value.capitalize()}: {len(grouped[category])}")
    lines.append(f"- Processing time: {outcome.duration_ms / 1000:.1f}s")

    return "\n".join(lines) + "\n"
