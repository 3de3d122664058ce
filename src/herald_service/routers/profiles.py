"""Profile API endpoints.

Design Decisions:

1. ``/me`` Resource:
   - Every self-service endpoint hangs off ``/api/v1/profiles/me`` and is
     resolved from the bearer token, so there is no way to address another
     user's profile by id except through the admin endpoints

2. Sections:
   - ``GET /me`` returns the profile-page sections the caller's role
     unlocks (see ``auth.profile_sections``) so clients render the page
     without re-implementing role rules

3. Notification Preferences:
   - Stored under ``Profile.preferences['notifications']``; updates are
     merged over the stored values, which are merged over the defaults
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import get_current_profile, profile_sections, require_admin
from herald_service.database import get_db
from herald_service.models import Article, Business, Profile
from herald_service.routers.articles import article_to_response
from herald_service.routers.businesses import business_to_response
from herald_service.schemas.article import ArticleResponse
from herald_service.schemas.business import BusinessResponse
from herald_service.schemas.profile import (
    ChangeRoleRequest,
    MeResponse,
    NotificationPreferences,
    ProfileListResponse,
    ProfileResponse,
    UpdateNotificationsRequest,
    UpdateProfileRequest,
)
from herald_service.storage import delete_file, public_url, read_image_upload, save_file

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/profiles",
    tags=["profiles"],
)

AVATAR_FOLDER = "avatars"


def profile_to_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse.model_validate(profile)


def notification_preferences(profile: Profile) -> NotificationPreferences:
    """Stored notification switches merged over the defaults."""
    stored = (profile.preferences or {}).get("notifications", {})
    return NotificationPreferences(**{**NotificationPreferences().model_dump(), **stored})


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Current profile",
    description="The caller's profile, visible profile sections and notification preferences.",
    responses={401: {"description": "Not authenticated"}},
)
async def get_me(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> MeResponse:
    return MeResponse(
        profile=profile_to_response(profile),
        sections=await profile_sections(db, profile),
        notifications=notification_preferences(profile),
    )


@router.patch(
    "/me",
    response_model=ProfileResponse,
    summary="Update personal info",
    responses={
        401: {"description": "Not authenticated"},
        409: {"description": "Username already taken"},
    },
)
async def update_me(
    data: UpdateProfileRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    updates = data.model_dump(exclude_unset=True)

    username = updates.get("username")
    if username and username != profile.username:
        result = await db.execute(
            select(Profile.id).where(Profile.username == username, Profile.id != profile.id)
        )
        if result.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Username '{username}' is already taken",
            )

    for field, value in updates.items():
        if field == "social_links":
            value = value or {}
        setattr(profile, field, value)

    await db.flush()
    await db.refresh(profile)
    return profile_to_response(profile)


@router.put(
    "/me/notifications",
    response_model=NotificationPreferences,
    summary="Update notification preferences",
    description="Switches not included in the request keep their stored value.",
    responses={401: {"description": "Not authenticated"}},
)
async def update_notifications(
    data: UpdateNotificationsRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> NotificationPreferences:
    merged = notification_preferences(profile).model_dump()
    merged.update({k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None})

    # Reassign so the JSON column is marked dirty
    profile.preferences = {**(profile.preferences or {}), "notifications": merged}
    await db.flush()

    return NotificationPreferences(**merged)


@router.post(
    "/me/avatar",
    response_model=ProfileResponse,
    summary="Upload avatar",
    description="JPEG, PNG, WebP or GIF up to the configured size limit. Replaces any previous avatar.",
    responses={
        400: {"description": "Missing filename or empty file"},
        401: {"description": "Not authenticated"},
        413: {"description": "File too large"},
        415: {"description": "Unsupported file type"},
    },
)
async def upload_avatar(
    file: UploadFile = File(..., description="Avatar image"),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    content = await read_image_upload(file)

    try:
        key = save_file(content, AVATAR_FOLDER, file.content_type or "")
    except OSError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save file: {e}",
        ) from e

    previous = profile.preferences.get("avatar_key") if profile.preferences else None

    profile.avatar_url = public_url(key)
    profile.preferences = {**(profile.preferences or {}), "avatar_key": key}
    try:
        await db.commit()
    except SQLAlchemyError:
        delete_file(key)
        raise

    if previous:
        delete_file(previous)
    await db.refresh(profile)

    return profile_to_response(profile)


@router.get(
    "/me/articles",
    response_model=list[ArticleResponse],
    summary="My articles",
    description="All of the caller's non-deleted articles in any status, newest first.",
    responses={401: {"description": "Not authenticated"}},
)
async def list_my_articles(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> list[ArticleResponse]:
    result = await db.execute(
        select(Article)
        .where(Article.author_id == profile.id, Article.deleted_at.is_(None))
        .order_by(Article.created_at.desc(), Article.id.desc())
    )
    return [article_to_response(a) for a in result.scalars().all()]


@router.get(
    "/me/businesses",
    response_model=list[BusinessResponse],
    summary="My businesses",
    responses={401: {"description": "Not authenticated"}},
)
async def list_my_businesses(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> list[BusinessResponse]:
    result = await db.execute(
        select(Business).where(Business.owner_id == profile.id).order_by(Business.name)
    )
    return [business_to_response(b) for b in result.scalars().all()]


# =============================================================================
# Admin
# =============================================================================


@router.get(
    "",
    response_model=ProfileListResponse,
    summary="List profiles (admin)",
    responses={403: {"description": "Admins only"}},
)
async def list_profiles(
    role: str | None = Query(default=None, description="Filter by role"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    _admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProfileListResponse:
    query = select(Profile)
    count_query = select(func.count(Profile.id))
    if role:
        query = query.where(Profile.role == role)
        count_query = count_query.where(Profile.role == role)

    result = await db.execute(
        query.order_by(Profile.created_at.desc(), Profile.id.desc()).limit(limit).offset(offset)
    )
    total = (await db.execute(count_query)).scalar() or 0

    return ProfileListResponse(
        items=[profile_to_response(p) for p in result.scalars().all()],
        total=total,
    )


@router.put(
    "/{profile_id}/role",
    response_model=ProfileResponse,
    summary="Change a profile's role (admin)",
    responses={
        400: {"description": "Admins cannot demote themselves"},
        403: {"description": "Admins only"},
        404: {"description": "Profile not found"},
    },
)
async def change_role(
    profile_id: int,
    data: ChangeRoleRequest,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    target = await db.get(Profile, profile_id)
    if target is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Profile with id {profile_id} not found",
        )
    if target.id == admin.id and data.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admins cannot remove their own admin role",
        )

    previous = target.role
    target.role = data.role
    await db.flush()
    await db.refresh(target)

    logger.info(f"Profile {target.id} role {previous} -> {data.role} by admin {admin.id}")
    return profile_to_response(target)
