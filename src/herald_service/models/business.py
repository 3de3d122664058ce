"""Business directory database model."""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from herald_service.database import Base, utc_now

if TYPE_CHECKING:
    from .media import Gallery
    from .profile import Profile


class Business(Base):
    """Local business listing.

    ``business_hours`` maps weekday names to ``{"open": "08:00", "close": "17:00"}``
    (or ``{"closed": true}``); ``social_links`` maps platform to URL;
    ``services`` is a list of service names searched by the directory.
    """

    __tablename__ = "businesses"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(150), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    # Contact
    website_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    business_hours: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    social_links: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    services: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Verification & ratings
    is_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    review_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    seo_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    seo_description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    logo_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    gallery_id: Mapped[int | None] = mapped_column(
        ForeignKey("galleries.id", ondelete="SET NULL"),
        nullable=True,
    )
    owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=func.now(),
    )

    owner: Mapped["Profile | None"] = relationship("Profile", lazy="selectin")
    gallery: Mapped["Gallery | None"] = relationship("Gallery", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Business(id={self.id}, slug='{self.slug}')>"

    def matches_search(self, term: str) -> bool:
        """Case-insensitive match over name, description, city, industry and services."""
        needle = term.lower()
        haystacks = [self.name, self.description, self.city, self.industry]
        if any(h and needle in h.lower() for h in haystacks):
            return True
        return any(needle in service.lower() for service in self.services or [])
