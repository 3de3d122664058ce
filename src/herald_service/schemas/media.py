"""Media upload and gallery schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from herald_service.content import sanitize_text

MediaType = Literal["image", "video", "audio", "document"]


class MediaResponse(BaseModel):
    """Stored file metadata."""

    id: int = Field(..., description="Media ID")
    filename: str = Field(..., description="Storage key")
    original_filename: str = Field(..., description="Filename as uploaded")
    file_url: str = Field(..., description="Public URL", examples=["/media/uploads/3f2a.jpg"])
    media_type: MediaType = Field(..., description="Media kind")
    mime_type: str = Field(..., description="MIME type", examples=["image/jpeg"])
    file_size: int | None = Field(None, description="Size in bytes")
    alt_text: str | None = None
    caption: str | None = None
    credits: str | None = None
    media_metadata: dict[str, Any] = Field(default_factory=dict, serialization_alias="metadata")
    uploaded_by: int | None = None
    is_public: bool = True
    created_at: datetime

    model_config = {"from_attributes": True}


class UpdateMediaRequest(BaseModel):
    alt_text: str | None = Field(default=None, max_length=500)
    caption: str | None = Field(default=None, max_length=2000)
    credits: str | None = Field(default=None, max_length=200)

    @field_validator("alt_text", "caption", "credits")
    @classmethod
    def sanitize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)


# =============================================================================
# Gallery Schemas
# =============================================================================


class GalleryItemRequest(BaseModel):
    media_id: int = Field(..., description="Media to add")
    caption: str | None = Field(default=None, max_length=2000)
    sort_order: int | None = Field(
        default=None,
        description="Position (appended after the last item if omitted)",
    )
    is_featured: bool = False

    @field_validator("caption")
    @classmethod
    def sanitize_caption(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)


class GalleryItemResponse(BaseModel):
    id: int
    media_id: int
    caption: str | None = None
    sort_order: int
    is_featured: bool
    media: MediaResponse

    model_config = {"from_attributes": True}


class CreateGalleryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, examples=["Farm stand 2026"])
    description: str | None = Field(default=None, max_length=2000)
    is_public: bool = True

    @field_validator("name", "description")
    @classmethod
    def sanitize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)


class GalleryResponse(BaseModel):
    """Gallery with items in ``sort_order``."""

    id: int
    name: str
    slug: str | None = None
    description: str | None = None
    is_public: bool
    created_by: int | None = None
    items: list[GalleryItemResponse] = Field(default_factory=list)
    created_at: datetime

    model_config = {"from_attributes": True}
