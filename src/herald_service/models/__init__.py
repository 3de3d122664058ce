"""SQLAlchemy models for database schema."""

# Import all models here to ensure they are registered with Base.metadata
# This is required for Alembic autogenerate to detect models

from .advertisement import AD_POSITIONS, AD_STATUSES, Advertisement
from .article import (
    ARTICLE_STATUSES,
    PUBLIC_STATUSES,
    TITLE_MAX_LENGTH,
    Article,
    ArticleStatus,
)
from .business import Business
from .category import TAG_NAME_MAX_LENGTH, Category, Tag, article_tags
from .media import Gallery, GalleryItem, Media
from .page import PAGE_TYPES, Page
from .profile import AUTHOR_ROLES, STAFF_ROLES, SUBSCRIBER_ROLES, USER_ROLES, Profile, UserRole
from .rss import RSSArticleTracking, RSSFetchLog, RSSSource

__all__ = [
    "AD_POSITIONS",
    "AD_STATUSES",
    "ARTICLE_STATUSES",
    "AUTHOR_ROLES",
    "PAGE_TYPES",
    "PUBLIC_STATUSES",
    "STAFF_ROLES",
    "SUBSCRIBER_ROLES",
    "TAG_NAME_MAX_LENGTH",
    "TITLE_MAX_LENGTH",
    "USER_ROLES",
    "Advertisement",
    "Article",
    "ArticleStatus",
    "Business",
    "Category",
    "Gallery",
    "GalleryItem",
    "Media",
    "Page",
    "Profile",
    "RSSArticleTracking",
    "RSSFetchLog",
    "RSSSource",
    "Tag",
    "UserRole",
    "article_tags",
]
