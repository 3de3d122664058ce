"""Article database model."""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from herald_service.database import Base, utc_now

from .category import article_tags

if TYPE_CHECKING:
    from .category import Category, Tag
    from .profile import Profile

ArticleStatus = Literal["draft", "scheduled", "published", "archived", "featured"]

ARTICLE_STATUSES: tuple[str, ...] = ("draft", "scheduled", "published", "archived", "featured")

# Statuses visible to anonymous readers
PUBLIC_STATUSES: tuple[str, ...] = ("published", "featured")

TITLE_MAX_LENGTH = 200


class Article(Base):
    """News article.

    Design Decisions:

    1. Slug uniqueness is enforced by a unique index. Writers that derive a
       slug from a title resolve collisions by appending ``-1``, ``-2``, ...

    2. Import provenance (RSS or scraped page) lives in ``article_metadata``
       (column name ``metadata``) rather than dedicated columns:
       ``{"source": "rss", "external_url": ..., "rss_source": ..., "imported_at": ...}``

    3. Soft delete via ``deleted_at``; every public query filters it out.

    4. Relationships are eager-loaded with ``selectin`` so responses can be
       built without lazy loads inside the async session.

    Status Lifecycle:
        draft -> scheduled -> published -> archived
          \\______________________/   \\-> featured
    """

    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
        unique=True,
        index=True,
        comment="URL slug (unique)",
    )
    subtitle: Mapped[str | None] = mapped_column(String(300), nullable=True)
    excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    featured_image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    status: Mapped[str] = mapped_column(
        Enum(*ARTICLE_STATUSES, name="article_status", create_constraint=True),
        nullable=False,
        default="draft",
        server_default="draft",
        index=True,
    )
    author_id: Mapped[int | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Engagement counters
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    shares: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    read_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # SEO
    seo_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    seo_description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    location_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    article_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
        comment="Import provenance and other loose metadata",
    )

    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
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
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
    )

    # Relationships
    author: Mapped["Profile | None"] = relationship("Profile", lazy="selectin")
    category: Mapped["Category | None"] = relationship("Category", lazy="selectin")
    tags: Mapped[list["Tag"]] = relationship(
        "Tag",
        secondary=article_tags,
        lazy="selectin",
        order_by="Tag.name",
    )

    __table_args__ = (
        Index("ix_articles_status_published", "status", "published_at"),
        Index("ix_articles_category_status", "category_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Article(id={self.id}, slug='{self.slug}', status='{self.status}')>"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_public(self) -> bool:
        return self.status in PUBLIC_STATUSES and self.deleted_at is None

    @property
    def external_url(self) -> str | None:
        """Original URL for imported articles."""
        return (self.article_metadata or {}).get("external_url")
