"""Import a single web page as a published article."""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.config import settings
from herald_service.content import clean_content, create_slug, estimate_reading_time, extract_excerpt
from herald_service.database import utc_now
from herald_service.models import TITLE_MAX_LENGTH, Article, Category, Profile
from herald_service.rss.processor import unique_slug

from .pipeline import ExtractionPipeline

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome of one URL import."""

    url: str
    created: bool
    article_id: int | None = None
    slug: str | None = None
    reason: str | None = None


async def find_article_by_external_url(db: AsyncSession, url: str) -> Article | None:
    """Find a non-deleted article imported from ``url``."""
    result = await db.execute(
        select(Article).where(
            Article.deleted_at.is_(None),
            Article.article_metadata["external_url"].as_string() == url,
        )
    )
    return result.scalars().first()


async def _resolve_category(db: AsyncSession, category_slug: str | None) -> Category | None:
    if category_slug:
        result = await db.execute(select(Category).where(Category.slug == category_slug))
        return result.scalar_one_or_none()

    # Default to a news/local section, else the first category
    result = await db.execute(select(Category).order_by(Category.name))
    categories = list(result.scalars().all())
    for category in categories:
        name = category.name.lower()
        if "news" in name or "local" in name:
            return category
    return categories[0] if categories else None


async def import_article_from_url(
    db: AsyncSession,
    url: str,
    author_email: str | None = None,
    category_slug: str | None = None,
    pipeline: ExtractionPipeline | None = None,
) -> ImportResult:
    """Scrape ``url`` and store it as a published article.

    Skips pages already imported (same external URL). The article body is
    sanitized to the content allowlist; the slug is derived from the page
    title and made unique.

    Args:
        db: Database session (flushed, not committed)
        url: Page URL
        author_email: Email of the profile credited as author
        category_slug: Category to file the article under (a news/local
            category or the first category when omitted)
        pipeline: Extraction pipeline (a default one is created when omitted)

    Returns:
        ImportResult

    Raises:
        ExtractionError: If the page cannot be fetched or has no article body
    """
    existing = await find_article_by_external_url(db, url)
    if existing is not None:
        logger.info(f"Article from {url} already exists ({existing.slug}), skipping")
        return ImportResult(
            url=url,
            created=False,
            article_id=existing.id,
            slug=existing.slug,
            reason="already imported",
        )

    pipeline = pipeline or ExtractionPipeline()
    extracted = await pipeline.extract(url)

    author = None
    if author_email:
        result = await db.execute(select(Profile).where(Profile.email == author_email.lower()))
        author = result.scalar_one_or_none()
        if author is None:
            logger.warning(f"Author {author_email} not found; importing without author")

    category = await _resolve_category(db, category_slug)

    title = (extracted.title or extracted.page.title or url)[:TITLE_MAX_LENGTH]
    content = clean_content(extracted.content_html)
    slug = await unique_slug(db, create_slug(title, settings.slug_max_length) or "article")

    article = Article(
        title=title,
        slug=slug,
        excerpt=extracted.page.description or extract_excerpt(content),
        content=content,
        featured_image_url=extracted.page.featured_image,
        status="published",
        author_id=author.id if author else None,
        category_id=category.id if category else None,
        published_at=extracted.published_date or utc_now(),
        read_time_minutes=estimate_reading_time(content),
        article_metadata={
            "source": "scrape",
            "external_url": url,
            "imported_at": utc_now().isoformat(),
        },
    )
    db.add(article)
    await db.flush()

    logger.info(f"Imported article '{title}' from {url} as {slug}")
    return ImportResult(url=url, created=True, article_id=article.id, slug=slug)
