"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-09-28 10:12:40.118254

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

USER_ROLE = sa.Enum(
    "user", "admin", "editor", "author", "subscriber", "premium_subscriber", name="user_role"
)
ARTICLE_STATUS = sa.Enum(
    "draft", "scheduled", "published", "archived", "featured", name="article_status"
)
MEDIA_TYPE = sa.Enum("image", "video", "audio", "document", name="media_type")
PAGE_TYPE = sa.Enum(
    "static", "home", "about", "contact", "privacy", "terms", "custom", name="page_type"
)
RSS_SOURCE_STATUS = sa.Enum("active", "paused", "error", name="rss_source_status")
RSS_FETCH_STATUS = sa.Enum("running", "success", "partial", "error", name="rss_fetch_status")


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
                nullable=False,
            )
        )
    return columns


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, comment="Login email (lowercased)"),
        sa.Column("username", sa.String(50), nullable=True, unique=True),
        sa.Column("full_name", sa.String(100), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.String(2048), nullable=True),
        sa.Column("role", USER_ROLE, nullable=False, server_default="user"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("social_links", sa.JSON(), nullable=False),
        sa.Column("preferences", sa.JSON(), nullable=False),
        sa.Column(
            "token_hash", sa.String(64), nullable=True, comment="SHA-256 of the API bearer token"
        ),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)
    op.create_index("ix_profiles_role", "profiles", ["role"])
    op.create_index("ix_profiles_token_hash", "profiles", ["token_hash"], unique=True)

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(20), nullable=False),
        sa.Column(
            "keywords",
            sa.JSON(),
            nullable=False,
            comment="Extra keywords used for RSS auto-categorization",
        ),
        *_timestamps(updated=False),
    )
    op.create_index("ix_categories_slug", "categories", ["slug"], unique=True)

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index("ix_tags_slug", "tags", ["slug"], unique=True)

    op.create_table(
        "media",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("filename", sa.String(255), nullable=False, unique=True),
        sa.Column("original_filename", sa.String(255), nullable=False),
        sa.Column("file_url", sa.String(2048), nullable=False),
        sa.Column("media_type", MEDIA_TYPE, nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("alt_text", sa.String(500), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("credits", sa.String(200), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column(
            "uploaded_by",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_media_uploaded_by", "media", ["uploaded_by"])

    op.create_table(
        "galleries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(150), nullable=True, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_by",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )

    op.create_table(
        "gallery_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "gallery_id",
            sa.Integer(),
            sa.ForeignKey("galleries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "media_id",
            sa.Integer(),
            sa.ForeignKey("media.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(updated=False),
    )
    op.create_index("ix_gallery_items_gallery_id", "gallery_items", ["gallery_id"])

    op.create_table(
        "articles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(150), nullable=False, comment="URL slug (unique)"),
        sa.Column("subtitle", sa.String(300), nullable=True),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("featured_image_url", sa.String(2048), nullable=True),
        sa.Column("status", ARTICLE_STATUS, nullable=False, server_default="draft"),
        sa.Column(
            "author_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("shares", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("read_time_minutes", sa.Integer(), nullable=True),
        sa.Column("seo_title", sa.String(200), nullable=True),
        sa.Column("seo_description", sa.String(500), nullable=True),
        sa.Column("location_name", sa.String(200), nullable=True),
        sa.Column(
            "metadata",
            sa.JSON(),
            nullable=False,
            comment="Import provenance and other loose metadata",
        ),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_articles_slug", "articles", ["slug"], unique=True)
    op.create_index("ix_articles_status", "articles", ["status"])
    op.create_index("ix_articles_author_id", "articles", ["author_id"])
    op.create_index("ix_articles_category_id", "articles", ["category_id"])
    op.create_index("ix_articles_published_at", "articles", ["published_at"])
    op.create_index("ix_articles_deleted_at", "articles", ["deleted_at"])
    op.create_index("ix_articles_status_published", "articles", ["status", "published_at"])
    op.create_index("ix_articles_category_status", "articles", ["category_id", "status"])

    op.create_table(
        "article_tags",
        sa.Column(
            "article_id",
            sa.Integer(),
            sa.ForeignKey("articles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "tag_id",
            sa.Integer(),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "businesses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(150), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("long_description", sa.Text(), nullable=True),
        sa.Column("industry", sa.String(100), nullable=True),
        sa.Column("website_url", sa.String(2048), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("zip_code", sa.String(20), nullable=True),
        sa.Column("business_hours", sa.JSON(), nullable=False),
        sa.Column("social_links", sa.JSON(), nullable=False),
        sa.Column("services", sa.JSON(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("review_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("seo_title", sa.String(200), nullable=True),
        sa.Column("seo_description", sa.String(500), nullable=True),
        sa.Column("logo_url", sa.String(2048), nullable=True),
        sa.Column("cover_image_url", sa.String(2048), nullable=True),
        sa.Column(
            "gallery_id",
            sa.Integer(),
            sa.ForeignKey("galleries.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "owner_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_businesses_name", "businesses", ["name"])
    op.create_index("ix_businesses_slug", "businesses", ["slug"], unique=True)
    op.create_index("ix_businesses_industry", "businesses", ["industry"])
    op.create_index("ix_businesses_owner_id", "businesses", ["owner_id"])

    op.create_table(
        "pages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(150), nullable=False),
        sa.Column("page_type", PAGE_TYPE, nullable=False),
        sa.Column("meta_title", sa.String(200), nullable=True),
        sa.Column("meta_description", sa.String(500), nullable=True),
        sa.Column("meta_keywords", sa.JSON(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("template_name", sa.String(100), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_in_menu", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("menu_order", sa.Integer(), nullable=False),
        sa.Column("seo_schema", sa.JSON(), nullable=False),
        sa.Column(
            "created_by",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "updated_by",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_pages_slug", "pages", ["slug"], unique=True)

    op.create_table(
        "rss_sources",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("feed_url", sa.String(2048), nullable=False, unique=True),
        sa.Column("website_url", sa.String(2048), nullable=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("status", RSS_SOURCE_STATUS, nullable=False, server_default="active"),
        sa.Column("fetch_frequency_hours", sa.Integer(), nullable=False, server_default="2"),
        sa.Column(
            "auto_publish",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Publish imported items immediately instead of as drafts",
        ),
        sa.Column(
            "default_author_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("content_language", sa.String(10), nullable=False),
        sa.Column("category_keywords", sa.JSON(), nullable=False),
        sa.Column(
            "use_auto_categorization", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("feed_title", sa.String(500), nullable=True),
        sa.Column("feed_description", sa.Text(), nullable=True),
        sa.Column("feed_language", sa.String(20), nullable=True),
        sa.Column("feed_copyright", sa.String(500), nullable=True),
        sa.Column("feed_image_url", sa.String(2048), nullable=True),
        sa.Column("last_fetched_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_successful_fetch_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("total_articles_imported", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_rss_sources_status", "rss_sources", ["status"])

    op.create_table(
        "rss_article_tracking",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "rss_source_id",
            sa.Integer(),
            sa.ForeignKey("rss_sources.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "article_id",
            sa.Integer(),
            sa.ForeignKey("articles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("original_guid", sa.String(2048), nullable=False),
        sa.Column("original_link", sa.String(2048), nullable=False),
        sa.Column("original_pub_date", sa.String(64), nullable=True),
        *_timestamps(updated=False),
        sa.UniqueConstraint("rss_source_id", "original_guid", name="uq_rss_tracking_source_guid"),
    )
    op.create_index(
        "ix_rss_article_tracking_rss_source_id", "rss_article_tracking", ["rss_source_id"]
    )
    op.create_index(
        "ix_rss_article_tracking_original_link", "rss_article_tracking", ["original_link"]
    )

    op.create_table(
        "rss_fetch_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "rss_source_id",
            sa.Integer(),
            sa.ForeignKey("rss_sources.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", RSS_FETCH_STATUS, nullable=False, server_default="running"),
        sa.Column(
            "fetch_started_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("fetch_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("items_found", sa.Integer(), nullable=False),
        sa.Column("items_new", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("fetch_duration_ms", sa.Integer(), nullable=True),
    )
    op.create_index("ix_rss_fetch_logs_rss_source_id", "rss_fetch_logs", ["rss_source_id"])


def downgrade() -> None:
    for table in (
        "rss_fetch_logs",
        "rss_article_tracking",
        "rss_sources",
        "pages",
        "businesses",
        "article_tags",
        "articles",
        "gallery_items",
        "galleries",
        "media",
        "tags",
        "categories",
        "profiles",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in (
        RSS_FETCH_STATUS,
        RSS_SOURCE_STATUS,
        PAGE_TYPE,
        MEDIA_TYPE,
        ARTICLE_STATUS,
        USER_ROLE,
    ):
        enum.drop(bind, checkfirst=True)
