"""Business advertisement database model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from herald_service.database import Base, ensure_utc, utc_now

if TYPE_CHECKING:
    from .business import Business

AD_POSITIONS: tuple[str, ...] = ("header", "sidebar", "content", "footer")

AD_STATUSES: tuple[str, ...] = ("active", "paused", "expired", "pending_approval")


class Advertisement(Base):
    """Advert placed by a directory business.

    Served only while ``status`` is active and the current time falls in
    ``[start_date, end_date)``. Ads created by business owners wait for
    staff approval.
    """

    __tablename__ = "advertisements"

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    link_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    position: Mapped[str] = mapped_column(
        Enum(*AD_POSITIONS, name="ad_position", create_constraint=True),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        Enum(*AD_STATUSES, name="ad_status", create_constraint=True),
        nullable=False,
        default="pending_approval",
        server_default="pending_approval",
        index=True,
    )

    impressions: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    clicks: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

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

    business: Mapped["Business"] = relationship("Business", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Advertisement(id={self.id}, position='{self.position}')>"

    def is_running(self, now: datetime | None = None) -> bool:
        """Active and inside its scheduled window."""
        now = now or utc_now()
        if self.status != "active" or ensure_utc(self.start_date) > now:
            return False
        return self.end_date is None or ensure_utc(self.end_date) > now
