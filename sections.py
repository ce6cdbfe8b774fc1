"""sections.py — Journal sections: canonical order, grouping and in-section sorting."""

from models import Article, Section
from script_detect import classify, collation_key, script_priority

ARTICLE_SECTIONS = [
    "ТЕХНИЧЕСКИЕ НАУКИ",
    "ПЕДАГОГИЧЕСКИЕ НАУКИ",
    "ЕСТЕСТВЕННЫЕ И ЭКОНОМИЧЕСКИЕ НАУКИ",
]

# Catch-all for articles whose section is empty or not canonical. Always last.
NEEDS_REVIEW_SECTION = "ТРЕБУЕТ КЛАССИФИКАЦИИ"


def is_valid_section(name: str, order: list[str] | None = None) -> bool:
    return name in (order or ARTICLE_SECTIONS)


def section_priority(name: str, order: list[str] | None = None) -> int:
    """Sort priority of a section name (lower = first); unknown names go last."""
    order = order or ARTICLE_SECTIONS
    return order.index(name) if name in order else len(order)


def sort_members(articles: list[Article]) -> list[Article]:
    """
    Order articles by (script priority, locale-aware author name).
    sorted() is stable, so identical keys keep their insertion order.
    """
    for article in articles:
        if not article.script:
            article.script = classify(article.author)
    return sorted(
        articles,
        key=lambda a: (script_priority(a.script), collation_key(a.author, a.script)),
    )


def group_articles(articles: list[Article], order: list[str] | None = None) -> list[Section]:
    """
    Partition articles into sections in canonical order.

    Every article lands in exactly one section. Empty sections are omitted.
    The needs-classification bucket keeps insertion order.
    """
    order = order or ARTICLE_SECTIONS
    buckets: dict[str, list[Article]] = {name: [] for name in order}
    unclassified: list[Article] = []

    for article in articles:
        if not article.script:
            article.script = classify(article.author)
        if article.section in buckets:
            buckets[article.section].append(article)
        else:
            unclassified.append(article)

    sections = []
    for priority, name in enumerate(order):
        members = buckets[name]
        if members:
            sections.append(Section(name=name, priority=priority, members=sort_members(members)))
    if unclassified:
        sections.append(Section(name=NEEDS_REVIEW_SECTION, priority=len(order), members=unclassified))
    return sections
