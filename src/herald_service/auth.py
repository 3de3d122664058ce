"""Bearer token authentication and role checks.

Design Decisions:

1. Opaque Tokens:
   - ``secrets.token_urlsafe`` token issued when a profile is created
     (or rotated); only its SHA-256 hex digest is stored
   - Rationale: No session store or signing key to manage; a leaked
     database does not leak usable tokens
   - Trade-off: No expiry; tokens are revoked by rotation

2. Dependencies:
   - ``get_current_profile``: 401 when the header is missing or unknown
   - ``get_optional_profile``: anonymous access allowed (None)
   - ``require_roles(*roles)``: 403 when the caller's role is not listed

Usage:
    @router.post("", dependencies=[Depends(require_roles("admin", "editor"))])
    async def create_category(...): ...

    async def update(profile: Profile = Depends(get_current_profile)): ...
"""

import hashlib
import secrets
from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.database import get_db, utc_now
from herald_service.models import Business, Profile

bearer_scheme = HTTPBearer(auto_error=False, description="Profile API token")

TOKEN_BYTES = 32


def generate_token() -> str:
    """Create a new random API token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """SHA-256 hex digest stored in ``Profile.token_hash``."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def issue_token(profile: Profile) -> str:
    """Assign a fresh token to ``profile`` and return the plain value.

    Any previously issued token stops working.
    """
    token = generate_token()
    profile.token_hash = hash_token(token)
    return token


async def authenticate(db: AsyncSession, token: str) -> Profile | None:
    """Resolve a plain token to its profile."""
    result = await db.execute(select(Profile).where(Profile.token_hash == hash_token(token)))
    return result.scalar_one_or_none()


async def get_optional_profile(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Profile | None:
    """Current profile, or None for anonymous requests.

    Raises:
        HTTPException: 401 if a token is supplied but invalid
    """
    if credentials is None:
        return None

    profile = await authenticate(db, credentials.credentials)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    profile.last_seen_at = utc_now()
    return profile


async def get_current_profile(
    profile: Profile | None = Depends(get_optional_profile),
) -> Profile:
    """Current profile; anonymous requests are rejected.

    Raises:
        HTTPException: 401 if no valid token is supplied
    """
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return profile


def require_roles(*roles: str) -> Callable[..., Awaitable[Profile]]:
    """Dependency factory: allow only profiles with one of ``roles``."""
    allowed = frozenset(roles)

    async def dependency(profile: Profile = Depends(get_current_profile)) -> Profile:
        if profile.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(sorted(allowed))}",
            )
        return profile

    return dependency


require_staff = require_roles("admin", "editor")
require_admin = require_roles("admin")
require_author = require_roles("admin", "editor", "author")


async def owns_business(db: AsyncSession, profile: Profile) -> bool:
    result = await db.execute(select(Business.id).where(Business.owner_id == profile.id).limit(1))
    return result.scalar_one_or_none() is not None


async def profile_sections(db: AsyncSession, profile: Profile) -> list[str]:
    """Profile page sections visible to ``profile``.

    personal       everyone
    content        authors, editors, admins
    businesses     owners of at least one business
    admin          admins, editors
    subscriber     subscribers (regular and premium)
    notifications  everyone
    """
    sections = ["personal"]
    if profile.can_author:
        sections.append("content")
    if await owns_business(db, profile):
        sections.append("businesses")
    if profile.is_staff:
        sections.append("admin")
    if profile.is_subscriber:
        sections.append("subscriber")
    sections.append("notifications")
    return sections
