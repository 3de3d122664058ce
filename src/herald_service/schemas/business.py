"""Business directory request/response schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_validator

from herald_service.content import sanitize_text

PHONE_PATTERN = r"^[\d\s\+\-\(\)]+$"


def _sanitize_optional(v: str | None) -> str | None:
    if v is None:
        return v
    return sanitize_text(v) or None


class CreateBusinessRequest(BaseModel):
    """Request schema for listing a business.

    The caller becomes the owner. The slug is derived from the name and
    made unique.
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Business name",
        examples=["Fambri Farms"],
    )
    description: str | None = Field(
        default=None,
        max_length=1000,
        description="Short description for listings",
    )
    long_description: str | None = Field(default=None, max_length=10000)
    industry: str | None = Field(default=None, max_length=100, examples=["Agriculture"])
    website_url: HttpUrl | None = Field(default=None, description="Website")
    phone: str | None = Field(
        default=None,
        max_length=20,
        pattern=PHONE_PATTERN,
        examples=["(555) 123-4567"],
    )
    email: EmailStr | None = Field(default=None, description="Contact email")
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    zip_code: str | None = Field(default=None, max_length=20)
    business_hours: dict[str, Any] = Field(
        default_factory=dict,
        description="Opening hours keyed by weekday",
        examples=[{"monday": "9:00-17:00", "sunday": "closed"}],
    )
    social_links: dict[str, str] = Field(default_factory=dict)
    services: list[str] = Field(default_factory=list, max_length=50)

    @field_validator("name")
    @classmethod
    def sanitize_name(cls, v: str) -> str:
        v = sanitize_text(v)
        if not v:
            raise ValueError("Business name is required")
        return v

    @field_validator(
        "description", "long_description", "industry", "phone", "address", "city", "state", "zip_code"
    )
    @classmethod
    def sanitize_optional_text(cls, v: str | None) -> str | None:
        return _sanitize_optional(v)

    @field_validator("services")
    @classmethod
    def clean_services(cls, v: list[str]) -> list[str]:
        return [s for s in (sanitize_text(item) for item in v) if s]


class UpdateBusinessRequest(BaseModel):
    """Partial business update. Omitted fields are unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    long_description: str | None = Field(default=None, max_length=10000)
    industry: str | None = Field(default=None, max_length=100)
    website_url: HttpUrl | None = None
    phone: str | None = Field(default=None, max_length=20, pattern=PHONE_PATTERN)
    email: EmailStr | None = None
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    zip_code: str | None = Field(default=None, max_length=20)
    business_hours: dict[str, Any] | None = None
    social_links: dict[str, str] | None = None
    services: list[str] | None = Field(default=None, max_length=50)
    logo_url: HttpUrl | None = None
    cover_image_url: HttpUrl | None = None

    @field_validator("name")
    @classmethod
    def sanitize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = sanitize_text(v)
        if not v:
            raise ValueError("Business name is required")
        return v

    @field_validator(
        "description", "long_description", "industry", "phone", "address", "city", "state", "zip_code"
    )
    @classmethod
    def sanitize_optional_text(cls, v: str | None) -> str | None:
        return _sanitize_optional(v)

    @field_validator("services")
    @classmethod
    def clean_services(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return [s for s in (sanitize_text(item) for item in v) if s]


class BusinessResponse(BaseModel):
    """Response schema for a directory listing."""

    id: int = Field(..., description="Business ID")
    name: str = Field(..., description="Business name")
    slug: str = Field(..., description="URL slug")
    description: str | None = None
    long_description: str | None = None
    industry: str | None = None
    website_url: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    business_hours: dict[str, Any] = Field(default_factory=dict)
    social_links: dict[str, str] = Field(default_factory=dict)
    services: list[str] = Field(default_factory=list)
    is_verified: bool = Field(False, description="Verified by staff")
    rating: float = Field(0.0, description="Average rating (0-5)")
    review_count: int = Field(0, description="Number of reviews")
    logo_url: str | None = None
    cover_image_url: str | None = None
    gallery_id: int | None = None
    owner_id: int | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": 1,
                    "name": "Fambri Farms",
                    "slug": "fambri-farms",
                    "description": "Family-run farm stand",
                    "industry": "Agriculture",
                    "city": "Riverside",
                    "services": ["Fresh produce", "CSA boxes"],
                    "is_verified": True,
                    "rating": 4.8,
                    "review_count": 37,
                    "created_at": "2026-01-19T10:00:00Z",
                    "updated_at": "2026-01-19T10:00:00Z",
                }
            ]
        },
    }


class BusinessListResponse(BaseModel):
    items: list[BusinessResponse] = Field(..., description="Businesses ordered by name")
    total: int = Field(..., description="Total matching businesses")


class IndustryListResponse(BaseModel):
    industries: list[str] = Field(..., description="Distinct industries, sorted")
