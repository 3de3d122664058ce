"""Article request/response schemas for API contract."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, HttpUrl, field_validator

from herald_service.content import sanitize_html, sanitize_text
from herald_service.models import TAG_NAME_MAX_LENGTH, TITLE_MAX_LENGTH

from .category import CategorySummary, TagResponse
from .profile import AuthorSummary

# =============================================================================
# Enums (as Literal types for better type safety)
# =============================================================================

ArticleStatus = Literal["draft", "scheduled", "published", "archived", "featured"]
AuthorStatus = Literal["draft", "scheduled"]
TagName = Annotated[str, Field(max_length=TAG_NAME_MAX_LENGTH)]


# =============================================================================
# Shared validators
# =============================================================================


def _clean_title(v: str) -> str:
    v = sanitize_text(v)
    if not v:
        raise ValueError("Title is required")
    return v


def _clean_content(v: str) -> str:
    v = sanitize_html(v)
    if not v.strip():
        raise ValueError("Content is required")
    return v


# =============================================================================
# Article Schemas
# =============================================================================


class CreateArticleRequest(BaseModel):
    """Request schema for writing an article.

    Design Decision: Input Sanitization in the Schema
    --------------------------------------------------
    Text fields go through ``sanitize_text`` and the body through the
    editor allowlist (``sanitize_html``) during validation, so route
    handlers only ever see cleaned values.

    The slug is optional. An explicit slug must be unused (409 otherwise);
    a slug derived from the title gets a numeric suffix on collision.
    Authors can only save drafts or schedule; publishing is a staff action.
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="Article headline",
        examples=["Council approves riverfront park plan"],
    )
    slug: str | None = Field(
        default=None,
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9-]+$",
        description="URL slug (lowercase letters, numbers, hyphens)",
        examples=["council-approves-riverfront-park-plan"],
    )
    subtitle: str | None = Field(default=None, max_length=300)
    excerpt: str | None = Field(
        default=None,
        max_length=500,
        description="Summary shown in listings (derived from content if omitted)",
    )
    content: str = Field(
        ...,
        min_length=1,
        max_length=50000,
        description="Article body (HTML, restricted to basic formatting)",
        examples=["<p>The county council voted 5-2 on Tuesday...</p>"],
    )
    category_id: int | None = Field(default=None, description="Category ID")
    featured_image_url: HttpUrl | None = Field(default=None, description="Lead image URL")
    tags: list[TagName] = Field(
        default_factory=list,
        max_length=20,
        description="Tag names (created if missing)",
        examples=[["riverfront", "parks"]],
    )
    status: AuthorStatus = Field(default="draft", description="Initial status")
    location_name: str | None = Field(default=None, max_length=200)
    seo_title: str | None = Field(default=None, max_length=200)
    seo_description: str | None = Field(default=None, max_length=500)

    @field_validator("title")
    @classmethod
    def sanitize_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("slug", "subtitle", "excerpt", "location_name", "seo_title", "seo_description")
    @classmethod
    def sanitize_optional_text(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v) or None

    @field_validator("content")
    @classmethod
    def sanitize_content(cls, v: str) -> str:
        return _clean_content(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        """Trim, sanitize and drop empty tag names."""
        return [name for name in (sanitize_text(t) for t in v) if name]


class UpdateArticleRequest(BaseModel):
    """Partial article update. Omitted fields are unchanged.

    A new slug must be unused by any other article.
    """

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    slug: str | None = Field(
        default=None,
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9-]+$",
    )
    subtitle: str | None = Field(default=None, max_length=300)
    excerpt: str | None = Field(default=None, max_length=500)
    content: str | None = Field(default=None, min_length=1, max_length=50000)
    category_id: int | None = None
    featured_image_url: HttpUrl | None = None
    tags: list[TagName] | None = Field(default=None, max_length=20)
    status: AuthorStatus | None = None
    location_name: str | None = Field(default=None, max_length=200)
    seo_title: str | None = Field(default=None, max_length=200)
    seo_description: str | None = Field(default=None, max_length=500)

    @field_validator("title")
    @classmethod
    def sanitize_title(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _clean_title(v)

    @field_validator("slug", "subtitle", "excerpt", "location_name", "seo_title", "seo_description")
    @classmethod
    def sanitize_optional_text(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator("content")
    @classmethod
    def sanitize_content(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _clean_content(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return [name for name in (sanitize_text(t) for t in v) if name]


class PublishArticleRequest(BaseModel):
    """Staff status change."""

    status: ArticleStatus = Field(
        default="published",
        description="Target status",
        examples=["published"],
    )
    published_at: datetime | None = Field(
        default=None,
        description="Publication time (defaults to now when publishing)",
    )


class ArticleResponse(BaseModel):
    """Response schema for a single article."""

    id: int = Field(..., description="Unique article identifier")
    title: str = Field(..., description="Headline")
    slug: str = Field(..., description="URL slug")
    subtitle: str | None = Field(None, description="Subtitle")
    excerpt: str | None = Field(None, description="Listing summary")
    content: str = Field(..., description="Article body (HTML)")
    featured_image_url: str | None = Field(None, description="Lead image URL")
    status: ArticleStatus = Field(..., description="Publication status")
    author: AuthorSummary | None = Field(None, description="Byline")
    category: CategorySummary | None = Field(None, description="Section")
    tags: list[TagResponse] = Field(default_factory=list, description="Tags")
    views: int = Field(0, description="View count")
    likes: int = Field(0, description="Like count")
    shares: int = Field(0, description="Share count")
    read_time_minutes: int | None = Field(None, description="Estimated reading time")
    location_name: str | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    external_url: str | None = Field(None, description="Original URL for imported articles")
    published_at: datetime | None = Field(None, description="Publication timestamp")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": 1,
                    "title": "Council approves riverfront park plan",
                    "slug": "council-approves-riverfront-park-plan",
                    "subtitle": None,
                    "excerpt": "The county council voted 5-2 on Tuesday...",
                    "content": "<p>The county council voted 5-2 on Tuesday...</p>",
                    "featured_image_url": None,
                    "status": "published",
                    "author": {"id": 3, "full_name": "Jane Doe", "username": "jdoe"},
                    "category": {"id": 1, "name": "Local News", "slug": "local-news"},
                    "tags": [{"id": 4, "name": "parks", "slug": "parks"}],
                    "views": 120,
                    "likes": 8,
                    "shares": 2,
                    "read_time_minutes": 3,
                    "published_at": "2026-01-19T10:00:00Z",
                    "created_at": "2026-01-19T09:00:00Z",
                    "updated_at": "2026-01-19T10:00:00Z",
                }
            ]
        },
    }


class ArticleListResponse(BaseModel):
    """Response schema for article listings."""

    items: list[ArticleResponse] = Field(..., description="Articles, newest first")
    total: int = Field(..., description="Total matching articles")
    limit: int = Field(..., description="Page size")
    offset: int = Field(..., description="Page offset")


class EngagementResponse(BaseModel):
    """Counters after a like or share."""

    id: int
    views: int
    likes: int
    shares: int
