"""Profile management helpers used by the CLI and the seeders."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import issue_token
from herald_service.models import USER_ROLES, Profile

logger = logging.getLogger(__name__)


class UserExistsError(ValueError):
    """A profile with this email already exists."""


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    email: str,
    full_name: str | None = None,
    role: str = "user",
    username: str | None = None,
    verified: bool = True,
    bio: str | None = None,
) -> tuple[Profile, str]:
    """Create a profile and issue its API token.

    Args:
        db: Database session (flushed, not committed)
        email: Login email, stored lowercased
        full_name: Display name
        role: One of ``USER_ROLES``
        username: Optional unique handle
        verified: Mark the email as confirmed
        bio: Short biography

    Returns:
        (profile, plain token). The token is not recoverable later.

    Raises:
        ValueError: Unknown role
        UserExistsError: Email already registered
    """
    if role not in USER_ROLES:
        raise ValueError(f"Unknown role '{role}' (expected one of {', '.join(USER_ROLES)})")

    email = email.strip().lower()
    if await get_profile_by_email(db, email) is not None:
        raise UserExistsError(f"User {email} already exists")

    profile = Profile(
        email=email,
        full_name=full_name,
        username=username,
        role=role,
        is_verified=verified,
        bio=bio,
    )
    token = issue_token(profile)
    db.add(profile)
    await db.flush()

    logger.info(f"Created profile {profile.id} ({email}, role={role})")
    return profile, token


async def list_users(db: AsyncSession, limit: int = 10) -> list[Profile]:
    """Most recently created profiles first."""
    result = await db.execute(
        select(Profile).order_by(Profile.created_at.desc(), Profile.id.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def verify_user(db: AsyncSession, email: str) -> Profile | None:
    """Mark a profile's email as confirmed. Returns None when unknown."""
    profile = await get_profile_by_email(db, email)
    if profile is None:
        return None

    if not profile.is_verified:
        profile.is_verified = True
        await db.flush()
        logger.info(f"Verified profile {profile.id} ({profile.email})")
    return profile


async def rotate_token(db: AsyncSession, email: str) -> str | None:
    """Replace a profile's API token. Returns the new token, or None when unknown."""
    profile = await get_profile_by_email(db, email)
    if profile is None:
        return None

    token = issue_token(profile)
    await db.flush()
    logger.info(f"Rotated token for profile {profile.id}")
    return token
