"""Advertisement request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl, field_validator

from herald_service.content import sanitize_text

AdPosition = Literal["header", "sidebar", "content", "footer"]
AdStatus = Literal["active", "paused", "expired", "pending_approval"]


def _clean_title(v: str) -> str:
    v = sanitize_text(v)
    if not v:
        raise ValueError("Title is required")
    return v


class CreateAdvertisementRequest(BaseModel):
    """Request schema for placing an advert for a business.

    Owners' ads start as ``pending_approval``; staff may set ``status``.
    """

    business_id: int = Field(..., description="Advertising business")
    title: str = Field(
        ...,
        min_length=1,
        max_length=100,
        examples=["Fambri Farms - Special Offer"],
    )
    description: str | None = Field(default=None, max_length=500)
    image_url: HttpUrl = Field(..., description="Banner image")
    link_url: HttpUrl | None = Field(default=None, description="Click-through target")
    position: AdPosition = Field(..., description="Placement on the page")
    start_date: datetime = Field(..., description="First moment the ad is served")
    end_date: datetime | None = Field(default=None, description="Ad stops being served at")
    status: AdStatus | None = Field(default=None, description="Staff only")

    @field_validator("title")
    @classmethod
    def sanitize_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v) or None


class UpdateAdvertisementRequest(BaseModel):
    """Partial advert update. Only staff may change ``status``."""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    image_url: HttpUrl | None = None
    link_url: HttpUrl | None = None
    position: AdPosition | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: AdStatus | None = None

    @field_validator("title")
    @classmethod
    def sanitize_title(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v) or None


class AdvertisementResponse(BaseModel):
    id: int
    business_id: int
    title: str
    description: str | None = None
    image_url: str
    link_url: str | None = None
    position: AdPosition
    status: AdStatus
    impressions: int = Field(0, description="Times served")
    clicks: int = Field(0, description="Recorded click-throughs")
    start_date: datetime
    end_date: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AdvertisementListResponse(BaseModel):
    items: list[AdvertisementResponse] = Field(..., description="Ads, newest start first")
    total: int = Field(..., description="Number of ads returned")
