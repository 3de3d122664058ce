"""RSS source administration schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl, field_validator

from herald_service.content import sanitize_text

from .category import CategorySummary

SourceStatus = Literal["active", "paused", "error"]
FetchStatus = Literal["running", "success", "partial", "error"]


def _clean_keywords(v: list[str]) -> list[str]:
    return [kw.strip().lower() for kw in v if kw.strip()]


class CreateRSSSourceRequest(BaseModel):
    """Request schema for adding a feed.

    Design Decision: Conservative Defaults
    ---------------------------------------
    New sources import as drafts (``auto_publish=False``) and let the
    keyword categorizer pick a section, so an unfamiliar feed never puts
    content on the front page without an editor looking at it.
    """

    name: str = Field(..., min_length=1, max_length=200, examples=["BBC Technology"])
    feed_url: HttpUrl = Field(
        ...,
        description="RSS or Atom feed URL",
        examples=["https://feeds.bbci.co.uk/news/technology/rss.xml"],
    )
    description: str | None = Field(default=None, max_length=2000)
    website_url: HttpUrl | None = None
    category_id: int | None = Field(default=None, description="Default category")
    status: SourceStatus = "active"
    fetch_frequency_hours: int = Field(default=2, ge=1, le=168)
    auto_publish: bool = False
    default_author_id: int | None = None
    content_language: str = Field(default="en", max_length=10)
    category_keywords: list[str] = Field(default_factory=list, max_length=50)
    use_auto_categorization: bool = True

    @field_validator("name", "description")
    @classmethod
    def sanitize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator("category_keywords")
    @classmethod
    def normalize_keywords(cls, v: list[str]) -> list[str]:
        return _clean_keywords(v)


class UpdateRSSSourceRequest(BaseModel):
    """Partial source update. Omitted fields are unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    feed_url: HttpUrl | None = None
    description: str | None = Field(default=None, max_length=2000)
    website_url: HttpUrl | None = None
    category_id: int | None = None
    status: SourceStatus | None = None
    fetch_frequency_hours: int | None = Field(default=None, ge=1, le=168)
    auto_publish: bool | None = None
    default_author_id: int | None = None
    content_language: str | None = Field(default=None, max_length=10)
    category_keywords: list[str] | None = Field(default=None, max_length=50)
    use_auto_categorization: bool | None = None

    @field_validator("name", "description")
    @classmethod
    def sanitize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator("category_keywords")
    @classmethod
    def normalize_keywords(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return _clean_keywords(v)


class RSSSourceResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    feed_url: str
    website_url: str | None = None
    category: CategorySummary | None = None
    status: SourceStatus
    fetch_frequency_hours: int
    auto_publish: bool
    default_author_id: int | None = None
    content_language: str
    category_keywords: list[str] = Field(default_factory=list)
    use_auto_categorization: bool
    feed_title: str | None = None
    feed_description: str | None = None
    feed_language: str | None = None
    feed_image_url: str | None = None
    last_fetched_at: datetime | None = None
    last_successful_fetch_at: datetime | None = None
    last_error: str | None = None
    total_articles_imported: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RSSSourceListResponse(BaseModel):
    items: list[RSSSourceResponse]
    total: int


class RSSFetchLogResponse(BaseModel):
    """One fetch attempt for a source."""

    id: int
    rss_source_id: int
    status: FetchStatus = Field(..., description="running, success, partial or error")
    fetch_started_at: datetime
    fetch_completed_at: datetime | None = None
    items_found: int = 0
    items_new: int = 0
    error_message: str | None = None
    fetch_duration_ms: int | None = None

    model_config = {"from_attributes": True}


class RSSFetchLogListResponse(BaseModel):
    items: list[RSSFetchLogResponse] = Field(..., description="Fetch attempts, newest first")
    total: int
