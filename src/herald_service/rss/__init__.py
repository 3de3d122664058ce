"""RSS ingestion pipeline.

Usage:
    from herald_service.rss import run

    async with AsyncSessionLocal() as db:
        summary = await run(db)
        print(summary.new_articles)
"""

from .categorizer import find_best_category, score_category
from .exceptions import FeedError, FeedFetchError, FeedParseError
from .parser import FeedItem, ParsedFeed, fetch_feed, parse_feed
from .processor import (
    ProcessedArticle,
    RunSummary,
    SourceResult,
    article_exists,
    create_article,
    get_due_sources,
    process_item,
    process_source,
    run,
    unique_slug,
)
from .setup import (
    create_rss_source,
    format_status_table,
    parse_suggested_feeds,
    setup_rss_feeds,
    suggest_feeds_for_categories,
)

__all__ = [
    # Parsing
    "FeedItem",
    "ParsedFeed",
    "fetch_feed",
    "parse_feed",
    # Categorization
    "find_best_category",
    "score_category",
    # Processing
    "ProcessedArticle",
    "RunSummary",
    "SourceResult",
    "article_exists",
    "create_article",
    "get_due_sources",
    "process_item",
    "process_source",
    "run",
    "unique_slug",
    # Setup
    "create_rss_source",
    "format_status_table",
    "parse_suggested_feeds",
    "setup_rss_feeds",
    "suggest_feeds_for_categories",
    # Exceptions
    "FeedError",
    "FeedFetchError",
    "FeedParseError",
]
