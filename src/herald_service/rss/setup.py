"""Feed discovery: suggest and register RSS sources for existing categories."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.config import settings
from herald_service.models import Category, Profile, RSSSource

from .processor import load_categories

logger = logging.getLogger(__name__)

# Keyword -> "Name|URL" suggestions. A category matches a keyword when the
# keyword equals its lowercased name or one of its slug words.
FEED_CATALOG: dict[str, list[str]] = {
    "business": [
        "BBC Business|https://feeds.bbci.co.uk/news/business/rss.xml",
        "The Guardian Business|https://www.theguardian.com/uk/business/rss",
    ],
    "technology": [
        "BBC Technology|https://feeds.bbci.co.uk/news/technology/rss.xml",
        "Ars Technica|https://feeds.arstechnica.com/arstechnica/index",
        "The Verge|https://www.theverge.com/rss/index.xml",
    ],
    "tech": [
        "BBC Technology|https://feeds.bbci.co.uk/news/technology/rss.xml",
    ],
    "sports": [
        "BBC Sport|https://feeds.bbci.co.uk/sport/rss.xml",
        "ESPN Top Headlines|https://www.espn.com/espn/rss/news",
    ],
    "sport": [
        "BBC Sport|https://feeds.bbci.co.uk/sport/rss.xml",
    ],
    "politics": [
        "BBC Politics|https://feeds.bbci.co.uk/news/politics/rss.xml",
        "The Guardian Politics|https://www.theguardian.com/politics/rss",
    ],
    "health": [
        "BBC Health|https://feeds.bbci.co.uk/news/health/rss.xml",
    ],
    "science": [
        "BBC Science & Environment|https://feeds.bbci.co.uk/news/science_and_environment/rss.xml",
    ],
    "environment": [
        "The Guardian Environment|https://www.theguardian.com/environment/rss",
    ],
    "entertainment": [
        "BBC Entertainment & Arts|https://feeds.bbci.co.uk/news/entertainment_and_arts/rss.xml",
    ],
    "arts": [
        "The Guardian Culture|https://www.theguardian.com/culture/rss",
    ],
    "world": [
        "BBC World|https://feeds.bbci.co.uk/news/world/rss.xml",
    ],
    "news": [
        "BBC Top Stories|https://feeds.bbci.co.uk/news/rss.xml",
    ],
    "travel": [
        "The Guardian Travel|https://www.theguardian.com/travel/rss",
    ],
    "food": [
        "The Guardian Food|https://www.theguardian.com/food/rss",
    ],
}


@dataclass
class CategorySuggestion:
    category: Category
    suggested_feeds: list[str] = field(default_factory=list)


@dataclass
class SetupReport:
    """Result of ``setup_rss_feeds``."""

    categories: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    without_suggestions: list[str] = field(default_factory=list)


def parse_suggested_feeds(values: Iterable[object] | None) -> list[tuple[str, str]]:
    """Parse ``"Name|URL"`` strings into (name, url) pairs.

    Entries without an http(s) URL are dropped.
    """
    if not values:
        return []

    feeds: list[tuple[str, str]] = []
    for value in values:
        if not isinstance(value, str):
            continue
        name, _, url = value.partition("|")
        url = url.strip()
        if url.startswith(("http://", "https://")):
            feeds.append((name.strip() or url, url))
    return feeds


def suggest_feeds_for_categories(categories: Sequence[Category]) -> list[CategorySuggestion]:
    """Match categories against the built-in feed catalog."""
    suggestions: list[CategorySuggestion] = []
    for category in categories:
        words = {category.name.lower().strip(), *category.slug.lower().split("-")}
        feeds: list[str] = []
        for keyword, entries in FEED_CATALOG.items():
            if keyword in words:
                feeds.extend(entry for entry in entries if entry not in feeds)
        suggestions.append(CategorySuggestion(category=category, suggested_feeds=feeds))
    return suggestions


async def get_default_author(db: AsyncSession) -> Profile | None:
    """First admin or editor profile, used as author of imported articles."""
    result = await db.execute(
        select(Profile)
        .where(Profile.role.in_(["admin", "editor"]))
        .order_by(Profile.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_rss_source(
    db: AsyncSession,
    name: str,
    feed_url: str,
    category: Category,
    keywords: list[str] | None = None,
) -> RSSSource | None:
    """Register a feed for a category.

    New sources start active, on the default cadence, importing drafts
    with auto-categorization enabled.

    Returns:
        The new source, or None when the feed URL is already registered
    """
    existing = await db.execute(select(RSSSource.id).where(RSSSource.feed_url == feed_url))
    if existing.scalar_one_or_none() is not None:
        logger.info(f"RSS source already exists: {name}")
        return None

    author = await get_default_author(db)
    source = RSSSource(
        name=name,
        description=f"{name} RSS feed for {category.name} category",
        feed_url=feed_url,
        category_id=category.id,
        status="active",
        fetch_frequency_hours=settings.rss_default_fetch_frequency_hours,
        auto_publish=False,
        default_author_id=author.id if author else None,
        content_language="en",
        category_keywords=keywords or [],
        use_auto_categorization=True,
    )

    try:
        async with db.begin_nested():
            db.add(source)
            await db.flush()
    except IntegrityError:
        logger.info(f"RSS source already exists: {name}")
        return None

    logger.info(f"Created RSS source: {name}")
    return source


async def setup_rss_feeds(db: AsyncSession) -> SetupReport:
    """Create suggested sources for every category."""
    report = SetupReport()
    categories = await load_categories(db)
    report.categories = [category.name for category in categories]

    if not categories:
        logger.warning("No categories found; create categories before setting up feeds")
        return report

    for suggestion in suggest_feeds_for_categories(categories):
        feeds = parse_suggested_feeds(suggestion.suggested_feeds)
        if not feeds:
            report.without_suggestions.append(suggestion.category.name)
            continue

        for name, url in feeds:
            keywords = [suggestion.category.name.lower()]
            created = await create_rss_source(db, name, url, suggestion.category, keywords)
            if created is None:
                report.skipped.append(name)
            else:
                report.created.append(name)

    return report


async def list_sources(db: AsyncSession) -> list[RSSSource]:
    # Refresh sources created in this session so their category is loaded
    result = await db.execute(
        select(RSSSource).order_by(RSSSource.name).execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


def _cell(value: str, width: int) -> str:
    return value.ljust(width)[:width]


def format_status_table(sources: Sequence[RSSSource]) -> str:
    """Render sources as a box-drawn status table."""
    if not sources:
        return "No RSS sources configured yet"

    lines = [
        f"Current RSS Sources ({len(sources)} total):",
        "┌─────────────────────────────────┬──────────────┬────────────┬────────────┬─────────────┐",
        "│ Name                            │ Category     │ Status     │ Auto-Pub   │ Articles    │",
        "├─────────────────────────────────┼──────────────┼────────────┼────────────┼─────────────┤",
    ]
    for source in sources:
        category = source.category.name if source.category else "None"
        lines.append(
            f"│ {_cell(source.name, 31)} "
            f"│ {_cell(category, 12)} "
            f"│ {_cell(source.status, 10)} "
            f"│ {_cell('Yes' if source.auto_publish else 'No', 10)} "
            f"│ {str(source.total_articles_imported or 0).rjust(9)}   │"
        )
    lines.append(
        "└─────────────────────────────────┴──────────────┴────────────┴────────────┴─────────────┘"
    )
    return "\n".join(lines)
