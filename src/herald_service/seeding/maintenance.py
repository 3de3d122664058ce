"""Bulk removal of content for resetting demo databases."""

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.models import (
    Advertisement,
    Article,
    Business,
    Category,
    Gallery,
    GalleryItem,
    Media,
    Page,
    Profile,
    RSSArticleTracking,
    RSSFetchLog,
    RSSSource,
    Tag,
    article_tags,
)
from herald_service.storage import delete_file

logger = logging.getLogger(__name__)


@dataclass
class ClearReport:
    """Rows deleted per table."""

    deleted: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.deleted.values())


async def _delete_all(db: AsyncSession, table, name: str, report: ClearReport) -> None:
    result = await db.execute(delete(table))
    report.deleted[name] = result.rowcount or 0


async def clear_articles(db: AsyncSession, report: ClearReport | None = None) -> ClearReport:
    """Delete every article with its tag links and RSS tracking rows.

    Tracking rows go too, so a later RSS run imports the same items again.
    """
    report = report or ClearReport()
    await _delete_all(db, article_tags, "article_tags", report)
    await _delete_all(db, RSSArticleTracking, "rss_article_tracking", report)
    await _delete_all(db, Article, "articles", report)
    logger.info(f"Cleared {report.deleted['articles']} articles")
    return report


async def clear_businesses(db: AsyncSession, report: ClearReport | None = None) -> ClearReport:
    """Delete every business and its advertisements."""
    report = report or ClearReport()
    await _delete_all(db, Advertisement, "advertisements", report)
    await _delete_all(db, Business, "businesses", report)
    logger.info(f"Cleared {report.deleted['businesses']} businesses")
    return report


async def clear_all(db: AsyncSession, include_profiles: bool = False) -> ClearReport:
    """Delete all content. Profiles are kept unless ``include_profiles``.

    Stored media files are removed from disk as well.
    """
    report = ClearReport()
    await clear_articles(db, report)
    await clear_businesses(db, report)

    result = await db.execute(select(Media.filename))
    keys = list(result.scalars().all())

    for table, name in (
        (GalleryItem, "gallery_items"),
        (Gallery, "galleries"),
        (Media, "media"),
        (Page, "pages"),
        (RSSFetchLog, "rss_fetch_logs"),
        (RSSSource, "rss_sources"),
        (Tag, "tags"),
        (Category, "categories"),
    ):
        await _delete_all(db, table, name, report)

    if include_profiles:
        await _delete_all(db, Profile, "profiles", report)

    await db.flush()
    removed = sum(1 for key in keys if delete_file(key))
    logger.info(f"Cleared {report.total} rows and {removed} media files")
    return report
