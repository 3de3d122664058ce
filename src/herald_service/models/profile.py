"""User profile database model."""

from datetime import datetime
from typing import Any, Literal

from sqlalchemy import JSON, Boolean, DateTime, Enum, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column

from herald_service.database import Base, utc_now

UserRole = Literal["user", "admin", "editor", "author", "subscriber", "premium_subscriber"]

USER_ROLES: tuple[str, ...] = (
    "user",
    "admin",
    "editor",
    "author",
    "subscriber",
    "premium_subscriber",
)

STAFF_ROLES = frozenset({"admin", "editor"})
AUTHOR_ROLES = frozenset({"admin", "editor", "author"})
SUBSCRIBER_ROLES = frozenset({"subscriber", "premium_subscriber"})


class Profile(Base):
    """Role-tagged user of the site.

    Authentication uses opaque bearer tokens. Only the SHA-256 hex digest
    of the token is stored (``token_hash``); the plain token is shown once
    when it is issued.

    Role capabilities:
        admin, editor          -> staff (moderate all content, RSS admin)
        admin, editor, author  -> may write articles
        subscriber, premium    -> subscription section on profile
        user                   -> personal info, own businesses
    """

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
        comment="Login email (lowercased)",
    )
    username: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    role: Mapped[str] = mapped_column(
        Enum(*USER_ROLES, name="user_role", create_constraint=True),
        nullable=False,
        default="user",
        server_default="user",
        index=True,
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    social_links: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    preferences: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    token_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
        index=True,
        comment="SHA-256 of the API bearer token",
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
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
        return f"<Profile(id={self.id}, email='{self.email}', role='{self.role}')>"

    @property
    def is_staff(self) -> bool:
        """Admins and editors moderate all content."""
        return self.role in STAFF_ROLES

    @property
    def can_author(self) -> bool:
        """Authors, editors and admins may write articles."""
        return self.role in AUTHOR_ROLES

    @property
    def is_subscriber(self) -> bool:
        return self.role in SUBSCRIBER_ROLES

    @property
    def display_name(self) -> str:
        return self.full_name or self.username or self.email
