"""RSS ingestion database models: sources, tracking rows and fetch logs."""

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Literal

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from herald_service.database import Base, ensure_utc, utc_now

if TYPE_CHECKING:
    from .category import Category

RSSSourceStatus = Literal["active", "paused", "error"]
FetchStatus = Literal["running", "success", "partial", "error"]


class RSSSource(Base):
    """Configured external feed.

    A source is *due* when it is active and either has never been fetched
    or ``last_fetched_at + fetch_frequency_hours`` has passed.

    Categorization:
    - ``category_id`` is the fixed category for imported articles
    - With ``use_auto_categorization`` (or no fixed category) each item is
      scored against all categories and ``category_keywords``
    """

    __tablename__ = "rss_sources"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    feed_url: Mapped[str] = mapped_column(String(2048), nullable=False, unique=True)
    website_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        Enum("active", "paused", "error", name="rss_source_status", create_constraint=True),
        nullable=False,
        default="active",
        server_default="active",
        index=True,
    )
    fetch_frequency_hours: Mapped[int] = mapped_column(
        Integer, nullable=False, default=2, server_default="2"
    )
    auto_publish: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="Publish imported items immediately instead of as drafts",
    )
    default_author_id: Mapped[int | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    content_language: Mapped[str] = mapped_column(String(10), nullable=False, default="en")
    category_keywords: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    use_auto_categorization: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    # Metadata reported by the feed itself
    feed_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    feed_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    feed_language: Mapped[str | None] = mapped_column(String(20), nullable=True)
    feed_copyright: Mapped[str | None] = mapped_column(String(500), nullable=True)
    feed_image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # Bookkeeping
    last_fetched_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_successful_fetch_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_articles_imported: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=func.now(),
    )

    category: Mapped["Category | None"] = relationship("Category", lazy="selectin")

    def __repr__(self) -> str:
        return f"<RSSSource(id={self.id}, name='{self.name}', status='{self.status}')>"

    def is_due(self, now: datetime) -> bool:
        """Check whether the source should be fetched at ``now``."""
        if self.status != "active":
            return False
        last = ensure_utc(self.last_fetched_at)
        if last is None:
            return True
        return last + timedelta(hours=self.fetch_frequency_hours) <= now


class RSSArticleTracking(Base):
    """One row per imported feed item, preventing duplicate imports."""

    __tablename__ = "rss_article_tracking"

    id: Mapped[int] = mapped_column(primary_key=True)
    rss_source_id: Mapped[int] = mapped_column(
        ForeignKey("rss_sources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    article_id: Mapped[int | None] = mapped_column(
        ForeignKey("articles.id", ondelete="SET NULL"),
        nullable=True,
    )
    original_guid: Mapped[str] = mapped_column(String(2048), nullable=False)
    original_link: Mapped[str] = mapped_column(String(2048), nullable=False, index=True)
    original_pub_date: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("rss_source_id", "original_guid", name="uq_rss_tracking_source_guid"),
    )

    def __repr__(self) -> str:
        return f"<RSSArticleTracking(source={self.rss_source_id}, article={self.article_id})>"


class RSSFetchLog(Base):
    """Record of one fetch attempt.

    Status transitions: running -> success | partial | error
    - success: feed fetched, every item handled without error
    - partial: feed fetched, some items failed
    - error: feed could not be fetched or parsed
    """

    __tablename__ = "rss_fetch_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    rss_source_id: Mapped[int] = mapped_column(
        ForeignKey("rss_sources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        Enum("running", "success", "partial", "error", name="rss_fetch_status", create_constraint=True),
        nullable=False,
        default="running",
        server_default="running",
    )
    fetch_started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
    fetch_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    items_found: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    items_new: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    fetch_duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<RSSFetchLog(id={self.id}, source={self.rss_source_id}, status='{self.status}')>"
