"""Static page request/response schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from herald_service.content import sanitize_html, sanitize_text

PageType = Literal["static", "home", "about", "contact", "privacy", "terms", "custom"]


class CreatePageRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, examples=["Newsletter"])
    slug: str = Field(
        ...,
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9-]+$",
        examples=["newsletter"],
    )
    page_type: PageType = "static"
    meta_title: str | None = Field(default=None, max_length=200)
    meta_description: str | None = Field(default=None, max_length=500)
    meta_keywords: list[str] = Field(default_factory=list)
    content: str | None = Field(default=None, max_length=50000)
    template_name: str = Field(default="default", max_length=100)
    is_published: bool = False
    is_in_menu: bool = False
    menu_order: int = 0
    seo_schema: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", "meta_title", "meta_description")
    @classmethod
    def sanitize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator("content")
    @classmethod
    def sanitize_content(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_html(v)


class UpdatePageRequest(BaseModel):
    """Partial page update. Omitted fields are unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    page_type: PageType | None = None
    meta_title: str | None = Field(default=None, max_length=200)
    meta_description: str | None = Field(default=None, max_length=500)
    meta_keywords: list[str] | None = None
    content: str | None = Field(default=None, max_length=50000)
    template_name: str | None = Field(default=None, max_length=100)
    is_published: bool | None = None
    is_in_menu: bool | None = None
    menu_order: int | None = None
    seo_schema: dict[str, Any] | None = None

    @field_validator("title", "meta_title", "meta_description")
    @classmethod
    def sanitize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator("content")
    @classmethod
    def sanitize_content(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_html(v)


class PageResponse(BaseModel):
    id: int
    title: str
    slug: str
    page_type: PageType
    meta_title: str | None = None
    meta_description: str | None = None
    meta_keywords: list[str] = Field(default_factory=list)
    content: str | None = None
    template_name: str = "default"
    is_published: bool = False
    is_in_menu: bool = False
    menu_order: int = 0
    seo_schema: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MenuItem(BaseModel):
    title: str
    slug: str
    menu_order: int

    model_config = {"from_attributes": True}
