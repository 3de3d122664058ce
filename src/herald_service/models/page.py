"""Static page database model."""

from datetime import datetime
from typing import Any, Literal

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column

from herald_service.database import Base, utc_now

PageType = Literal["static", "home", "about", "contact", "privacy", "terms", "custom"]

PAGE_TYPES: tuple[str, ...] = ("static", "home", "about", "contact", "privacy", "terms", "custom")


class Page(Base):
    """Editor-managed page such as the newsletter signup or about page."""

    __tablename__ = "pages"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(150), nullable=False, unique=True, index=True)
    page_type: Mapped[str] = mapped_column(
        Enum(*PAGE_TYPES, name="page_type", create_constraint=True),
        nullable=False,
        default="static",
    )
    meta_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    meta_keywords: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    template_name: Mapped[str] = mapped_column(String(100), nullable=False, default="default")
    is_published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_in_menu: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    menu_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    seo_schema: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    updated_by: Mapped[int | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
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

    def __repr__(self) -> str:
        return f"<Page(id={self.id}, slug='{self.slug}')>"
