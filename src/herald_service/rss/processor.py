"""RSS batch ingestion: turn feed items into draft or published articles.

Design Decisions:

1. Sequential Processing:
   - One source at a time, one item at a time
   - Fixed politeness delays (``rss_item_delay_seconds`` between created
     items, ``rss_source_delay_seconds`` between sources)
   - No concurrency: upstream feeds are small and fetched every few hours

2. Deduplication:
   - A tracking row per imported item, unique on (source, guid)
   - An item is skipped when a tracking row for the same source matches
     either its guid or its link

3. Failure Isolation:
   - Feed fetch/parse failure: source ``last_error`` set, fetch log ``error``
   - Item failure: recorded in the result and the fetch log (``partial``),
     remaining items still processed
   - Each article insert runs in a SAVEPOINT so one bad row cannot poison
     the session

4. Commit Granularity:
   - ``process_source`` only flushes; ``run`` commits after each source so
     finished sources survive a later crash
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.config import settings
from herald_service.content import (
    clean_content,
    create_slug,
    estimate_reading_time,
    extract_excerpt,
    extract_image,
    extract_tags,
)
from herald_service.database import utc_now
from herald_service.logging_config import get_logger
from herald_service.models import (
    TAG_NAME_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Article,
    Category,
    RSSArticleTracking,
    RSSFetchLog,
    RSSSource,
    Tag,
)

from .categorizer import find_best_category
from .exceptions import FeedError
from .parser import FeedItem, fetch_feed

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, str, "SourceResult"], Awaitable[None]]


@dataclass
class ProcessedArticle:
    """Feed item converted to article fields, ready for insert."""

    title: str
    slug: str
    excerpt: str
    content: str
    published_at: datetime
    status: str
    author_id: int | None
    category_id: int | None
    featured_image_url: str | None = None
    tags: list[str] = field(default_factory=list)
    external_url: str | None = None
    rss_data: dict[str, str] = field(default_factory=dict)


@dataclass
class SourceResult:
    """Outcome of processing one source."""

    success: bool
    new_articles: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class RunSummary:
    """Totals for one ingestion run."""

    sources_due: int = 0
    sources_processed: int = 0
    sources_failed: int = 0
    new_articles: int = 0
    errors: int = 0
    cancelled: bool = False


def process_item(
    item: FeedItem,
    source: RSSSource,
    categories: Sequence[Category] = (),
) -> ProcessedArticle | None:
    """Convert a feed item into article fields.

    Returns None for items that should be skipped: missing title or link,
    or cleaned content shorter than ``rss_min_content_length``.
    """
    if not item.title or not item.link:
        logger.warning("rss_item_skipped", reason="missing title or link", source=source.name)
        return None

    cleaned = clean_content(item.content or item.description or "")
    if len(cleaned) < settings.rss_min_content_length:
        logger.warning(
            "rss_item_skipped",
            reason="insufficient content",
            title=item.title,
            length=len(cleaned),
        )
        return None

    title = item.title.strip()[:TITLE_MAX_LENGTH]
    excerpt = extract_excerpt(cleaned, settings.rss_excerpt_length)

    category_id = source.category_id
    if not category_id or source.use_auto_categorization:
        best = find_best_category(
            categories,
            title,
            excerpt or item.description or "",
            source.category_keywords or [],
        )
        if best is not None:
            category_id = best.id
            logger.info("rss_item_categorized", title=title, category=best.slug)

    return ProcessedArticle(
        title=title,
        slug=create_slug(title, settings.slug_max_length) or "article",
        excerpt=excerpt,
        content=cleaned,
        published_at=item.published_at or utc_now(),
        status="published" if source.auto_publish else "draft",
        author_id=source.default_author_id,
        category_id=category_id,
        featured_image_url=extract_image(item),
        tags=extract_tags(item.title, item.description, item.categories, settings.rss_max_tags),
        external_url=item.link,
        rss_data={
            "guid": item.guid or item.link,
            "link": item.link,
            "pub_date": item.pub_date or utc_now().isoformat(),
            "source_name": source.name,
        },
    )


async def article_exists(db: AsyncSession, guid: str, link: str, source_id: int) -> bool:
    """Check for a tracking row of this source matching guid or link."""
    result = await db.execute(
        select(RSSArticleTracking.id)
        .where(
            RSSArticleTracking.rss_source_id == source_id,
            or_(
                RSSArticleTracking.original_guid == guid,
                RSSArticleTracking.original_link == link,
            ),
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def unique_slug(db: AsyncSession, slug: str, model: type = Article) -> str:
    """Append ``-1``, ``-2``, ... until the slug is unused for ``model``."""
    candidate = slug
    counter = 1
    while True:
        result = await db.execute(select(model.id).where(model.slug == candidate).limit(1))
        if result.scalar_one_or_none() is None:
            return candidate
        candidate = f"{slug}-{counter}"
        counter += 1


async def get_or_create_tags(db: AsyncSession, names: Sequence[str]) -> list[Tag]:
    """Upsert tags by slug and return them in input order.

    Names longer than the tag column are cut to fit.
    """
    tags: list[Tag] = []
    seen: set[str] = set()

    for name in names:
        name = name.strip()[:TAG_NAME_MAX_LENGTH]
        slug = create_slug(name, TAG_NAME_MAX_LENGTH)
        if not slug or slug in seen:
            continue
        seen.add(slug)

        result = await db.execute(select(Tag).where(Tag.slug == slug))
        tag = result.scalar_one_or_none()
        if tag is None:
            tag = Tag(name=name, slug=slug)
            db.add(tag)
        tags.append(tag)

    return tags


async def create_article(db: AsyncSession, article: ProcessedArticle, source_id: int) -> bool:
    """Insert the article, its tracking row and tag links.

    A failed tracking insert is logged but does not fail the import.

    Returns:
        True if the article row was created
    """
    try:
        async with db.begin_nested():
            slug = await unique_slug(db, article.slug)
            tags = await get_or_create_tags(db, article.tags)

            new_article = Article(
                title=article.title,
                slug=slug,
                excerpt=article.excerpt,
                content=article.content,
                featured_image_url=article.featured_image_url,
                published_at=article.published_at,
                author_id=article.author_id,
                category_id=article.category_id,
                status=article.status,
                read_time_minutes=estimate_reading_time(article.content),
                article_metadata={
                    "source": "rss",
                    "external_url": article.external_url,
                    "rss_source": article.rss_data.get("source_name"),
                    "imported_at": utc_now().isoformat(),
                },
            )
            new_article.tags = tags
            db.add(new_article)
            await db.flush()
    except SQLAlchemyError as e:
        logger.error("rss_article_insert_failed", title=article.title, error=str(e))
        return False

    try:
        async with db.begin_nested():
            db.add(
                RSSArticleTracking(
                    rss_source_id=source_id,
                    article_id=new_article.id,
                    original_guid=article.rss_data["guid"],
                    original_link=article.rss_data["link"],
                    original_pub_date=article.rss_data.get("pub_date"),
                )
            )
            await db.flush()
    except SQLAlchemyError as e:
        logger.error("rss_tracking_insert_failed", article_id=new_article.id, error=str(e))

    return True


async def load_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())


async def process_source(
    db: AsyncSession,
    source: RSSSource,
    *,
    categories: Sequence[Category] | None = None,
    item_delay: float | None = None,
) -> SourceResult:
    """Fetch one source and import its new items.

    Opens a ``running`` fetch log, fetches the feed, refreshes the source's
    feed metadata and imports every item that is not already tracked.
    The fetch log ends as ``success``, ``partial`` (some items failed) or
    ``error`` (feed could not be fetched).

    Args:
        db: Database session (flushed, not committed)
        source: Source to process
        categories: Candidate categories for auto-categorization
            (loaded from the database when omitted)
        item_delay: Pause after each created article in seconds

    Returns:
        SourceResult with the number of new articles and error messages
    """
    delay = settings.rss_item_delay_seconds if item_delay is None else item_delay
    started = time.perf_counter()
    errors: list[str] = []
    new_articles = 0

    log_entry = RSSFetchLog(rss_source_id=source.id, status="running")
    db.add(log_entry)
    await db.flush()

    logger.info("rss_source_started", source=source.name, url=source.feed_url)

    try:
        feed = await fetch_feed(source.feed_url)
    except FeedError as e:
        message = f"Failed to fetch RSS feed: {e}"
        logger.error("rss_source_failed", source=source.name, error=str(e))

        now = utc_now()
        source.last_error = message
        source.last_fetched_at = now
        log_entry.status = "error"
        log_entry.error_message = message
        log_entry.fetch_completed_at = now
        log_entry.fetch_duration_ms = int((time.perf_counter() - started) * 1000)
        await db.flush()
        return SourceResult(success=False, new_articles=0, errors=[message])

    logger.info("rss_feed_parsed", source=source.name, items=len(feed.items))

    source.feed_title = feed.title
    source.feed_description = feed.description
    source.feed_language = feed.language
    source.feed_copyright = feed.copyright
    source.feed_image_url = feed.image_url
    source.last_fetched_at = utc_now()
    await db.flush()

    if categories is None:
        categories = await load_categories(db)

    for item in feed.items:
        try:
            if item.link and await article_exists(db, item.guid or item.link, item.link, source.id):
                logger.debug("rss_item_exists", title=item.title)
                continue

            processed = process_item(item, source, categories)
            if processed is None:
                continue

            if await create_article(db, processed, source.id):
                new_articles += 1
                logger.info("rss_article_created", title=processed.title, status=processed.status)
            else:
                errors.append(f"Failed to create article: {item.title}")

            await asyncio.sleep(delay)

        except Exception as e:
            message = f'Error processing item "{item.title}": {e}'
            logger.error("rss_item_failed", source=source.name, error=message)
            errors.append(message)

    now = utc_now()
    source.last_successful_fetch_at = now
    source.total_articles_imported = (source.total_articles_imported or 0) + new_articles
    source.last_error = None

    log_entry.status = "success" if not errors else "partial"
    log_entry.items_found = len(feed.items)
    log_entry.items_new = new_articles
    log_entry.error_message = "; ".join(errors) if errors else None
    log_entry.fetch_completed_at = now
    log_entry.fetch_duration_ms = int((time.perf_counter() - started) * 1000)
    await db.flush()

    logger.info(
        "rss_source_finished",
        source=source.name,
        new_articles=new_articles,
        errors=len(errors),
    )
    return SourceResult(success=True, new_articles=new_articles, errors=errors)


async def get_due_sources(db: AsyncSession, now: datetime | None = None) -> list[RSSSource]:
    """Active sources never fetched or whose fetch interval has elapsed."""
    now = now or utc_now()
    result = await db.execute(
        select(RSSSource).where(RSSSource.status == "active").order_by(RSSSource.id)
    )
    return [source for source in result.scalars().all() if source.is_due(now)]


async def run(
    db: AsyncSession,
    *,
    now: datetime | None = None,
    source_delay: float | None = None,
    item_delay: float | None = None,
    on_progress: ProgressCallback | None = None,
    is_cancelled: Callable[[], bool] | None = None,
) -> RunSummary:
    """Process every due source sequentially.

    Args:
        db: Database session (committed after each source)
        now: Reference time for due checks (defaults to current UTC time)
        source_delay: Pause between sources in seconds
        item_delay: Pause between created articles in seconds
        on_progress: Awaited after each source with (done, total, source name, result)
        is_cancelled: Checked before each source; stops the run when True

    Returns:
        RunSummary with totals
    """
    delay = settings.rss_source_delay_seconds if source_delay is None else source_delay
    sources = await get_due_sources(db, now)
    summary = RunSummary(sources_due=len(sources))

    if not sources:
        logger.info("rss_run_nothing_due")
        return summary

    logger.info("rss_run_started", sources=len(sources))
    categories = await load_categories(db)

    for index, source in enumerate(sources, start=1):
        if is_cancelled is not None and is_cancelled():
            logger.info("rss_run_cancelled", processed=summary.sources_processed)
            summary.cancelled = True
            break

        result = await process_source(db, source, categories=categories, item_delay=item_delay)
        await db.commit()

        summary.sources_processed += 1
        summary.new_articles += result.new_articles
        summary.errors += len(result.errors)
        if not result.success:
            summary.sources_failed += 1

        if on_progress is not None:
            await on_progress(index, len(sources), source.name, result)

        if index < len(sources):
            await asyncio.sleep(delay)

    logger.info(
        "rss_run_finished",
        new_articles=summary.new_articles,
        errors=summary.errors,
    )
    return summary
