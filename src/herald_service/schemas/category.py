"""Category and tag request/response schemas."""

from pydantic import BaseModel, Field, field_validator

from herald_service.content import sanitize_text

# =============================================================================
# Category Schemas
# =============================================================================


class CategoryResponse(BaseModel):
    """Editorial section."""

    id: int = Field(..., description="Category ID")
    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="URL slug")
    description: str | None = Field(None, description="Section description")
    color: str = Field("#3B82F6", description="Badge colour (CSS)")
    keywords: list[str] = Field(
        default_factory=list,
        description="Extra keywords for RSS auto-categorization",
    )

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": 1,
                    "name": "Local News",
                    "slug": "local-news",
                    "description": "News from around the county",
                    "color": "#3B82F6",
                    "keywords": ["council", "county"],
                }
            ]
        },
    }


class CreateCategoryRequest(BaseModel):
    """Request schema for creating a category.

    The slug is derived from the name when omitted.
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name",
        examples=["Local News"],
    )
    slug: str | None = Field(
        default=None,
        max_length=100,
        pattern=r"^[a-z0-9-]+$",
        description="URL slug (derived from name if omitted)",
        examples=["local-news"],
    )
    description: str | None = Field(default=None, max_length=1000)
    color: str = Field(default="#3B82F6", max_length=20)
    keywords: list[str] = Field(default_factory=list, max_length=50)

    @field_validator("name", "description")
    @classmethod
    def sanitize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, v: list[str]) -> list[str]:
        """Lowercase, trim and drop empty keywords."""
        return [kw.strip().lower() for kw in v if kw.strip()]


class CategoryListResponse(BaseModel):
    items: list[CategoryResponse] = Field(..., description="Categories ordered by name")
    total: int = Field(..., description="Number of categories")


# =============================================================================
# Tag Schemas
# =============================================================================


class TagResponse(BaseModel):
    id: int = Field(..., description="Tag ID")
    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="URL slug (unique)")

    model_config = {"from_attributes": True}


class CreateTagRequest(BaseModel):
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Tag name",
        examples=["Farmers Market"],
    )

    @field_validator("name")
    @classmethod
    def sanitize_name(cls, v: str) -> str:
        v = sanitize_text(v)
        if not v:
            raise ValueError("Tag name cannot be empty")
        return v


class TagListResponse(BaseModel):
    items: list[TagResponse] = Field(..., description="Tags ordered by name")
    total: int = Field(..., description="Number of tags")


class CategorySummary(BaseModel):
    """Compact category embedded in article responses."""

    id: int
    name: str
    slug: str
    color: str = "#3B82F6"

    model_config = {"from_attributes": True}
