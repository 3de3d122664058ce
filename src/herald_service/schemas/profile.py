"""Profile request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from herald_service.content import sanitize_text

UserRole = Literal["user", "admin", "editor", "author", "subscriber", "premium_subscriber"]
ProfileSection = Literal["personal", "content", "businesses", "admin", "subscriber", "notifications"]

SOCIAL_PLATFORMS = ("twitter", "linkedin", "instagram", "website")


# =============================================================================
# Notification Preferences
# =============================================================================


class NotificationPreferences(BaseModel):
    """Notification switches stored under ``Profile.preferences``.

    Missing keys take these defaults, so a profile that never saved its
    preferences reads the same as one that saved the defaults.
    """

    email_notifications: bool = True
    push_notifications: bool = False
    browser_notifications: bool = False
    newsletter_weekly: bool = True
    newsletter_breaking: bool = True
    article_comments: bool = True
    article_likes: bool = False
    new_articles_following: bool = True
    business_updates: bool = False
    system_updates: bool = True
    marketing_updates: bool = False
    reminder_notifications: bool = True


class UpdateNotificationsRequest(BaseModel):
    """Partial update; omitted switches keep their stored value."""

    email_notifications: bool | None = None
    push_notifications: bool | None = None
    browser_notifications: bool | None = None
    newsletter_weekly: bool | None = None
    newsletter_breaking: bool | None = None
    article_comments: bool | None = None
    article_likes: bool | None = None
    new_articles_following: bool | None = None
    business_updates: bool | None = None
    system_updates: bool | None = None
    marketing_updates: bool | None = None
    reminder_notifications: bool | None = None


# =============================================================================
# Profile Schemas
# =============================================================================


class AuthorSummary(BaseModel):
    """Public byline embedded in article responses."""

    id: int
    full_name: str | None = None
    username: str | None = None
    avatar_url: str | None = None

    model_config = {"from_attributes": True}


class ProfileResponse(BaseModel):
    """Profile as seen by its owner or by staff."""

    id: int = Field(..., description="Profile ID")
    email: str = Field(..., description="Login email")
    username: str | None = Field(None, description="Public username")
    full_name: str | None = Field(None, description="Display name")
    bio: str | None = Field(None, description="Short biography")
    avatar_url: str | None = Field(None, description="Avatar image URL")
    role: UserRole = Field(..., description="Role controlling permissions")
    is_verified: bool = Field(False, description="Whether the email is verified")
    social_links: dict[str, str] = Field(default_factory=dict)
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": 3,
                    "email": "author@riversideherald.example",
                    "username": "jdoe",
                    "full_name": "Jane Doe",
                    "bio": "Covers county politics.",
                    "avatar_url": None,
                    "role": "author",
                    "is_verified": True,
                    "social_links": {"twitter": "https://twitter.com/jdoe"},
                    "created_at": "2026-01-19T10:00:00Z",
                    "updated_at": "2026-01-19T10:00:00Z",
                }
            ]
        },
    }


class MeResponse(BaseModel):
    """Current profile with the profile-page sections its role unlocks."""

    profile: ProfileResponse
    sections: list[ProfileSection] = Field(
        ...,
        description="Visible profile sections in display order",
        examples=[["personal", "content", "notifications"]],
    )
    notifications: NotificationPreferences = Field(
        ..., description="Notification preferences with defaults applied"
    )


class UpdateProfileRequest(BaseModel):
    """Personal info update. Omitted fields are unchanged."""

    full_name: str | None = Field(default=None, max_length=100)
    username: str | None = Field(
        default=None,
        min_length=3,
        max_length=50,
        pattern=r"^[A-Za-z0-9_.-]+$",
        examples=["jdoe"],
    )
    bio: str | None = Field(default=None, max_length=1000)
    social_links: dict[str, str] | None = Field(
        default=None,
        description=f"Links keyed by platform ({', '.join(SOCIAL_PLATFORMS)})",
    )

    @field_validator("full_name", "bio")
    @classmethod
    def sanitize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator("social_links")
    @classmethod
    def validate_social_links(cls, v: dict[str, str] | None) -> dict[str, str] | None:
        """Keep known platforms with http(s) URLs; blank values remove a link."""
        if v is None:
            return v
        links: dict[str, str] = {}
        for platform, url in v.items():
            if platform not in SOCIAL_PLATFORMS:
                raise ValueError(f"Unknown social platform: {platform}")
            url = url.strip()
            if not url:
                continue
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"{platform} link must be an http(s) URL")
            links[platform] = url
        return links


class ChangeRoleRequest(BaseModel):
    role: UserRole = Field(..., description="New role", examples=["editor"])


class ProfileListResponse(BaseModel):
    items: list[ProfileResponse] = Field(..., description="Profiles, newest first")
    total: int = Field(..., description="Total number of profiles")
