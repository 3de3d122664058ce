"""Business directory API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import get_current_profile
from herald_service.config import settings
from herald_service.content import create_slug
from herald_service.database import get_db
from herald_service.extraction import ExtractionError, ExtractionPipeline, extract_business_images
from herald_service.models import Business, Profile
from herald_service.rss.processor import unique_slug
from herald_service.schemas.business import (
    BusinessListResponse,
    BusinessResponse,
    CreateBusinessRequest,
    IndustryListResponse,
    UpdateBusinessRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/businesses",
    tags=["businesses"],
)

URL_FIELDS = ("website_url", "logo_url", "cover_image_url")
REQUIRED_FIELDS = ("name", "business_hours", "social_links", "services")


def business_to_response(business: Business) -> BusinessResponse:
    return BusinessResponse.model_validate(business)


async def get_business_or_404(business_id: int, db: AsyncSession) -> Business:
    business = await db.get(Business, business_id)
    if business is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Business with id {business_id} not found",
        )
    return business


def ensure_can_manage(business: Business, profile: Profile) -> None:
    """Raise 403 unless ``profile`` owns the business or is staff."""
    if profile.is_staff or business.owner_id == profile.id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You can only manage your own businesses",
    )


def _plain_urls(values: dict) -> dict:
    return {
        key: (str(value) if key in URL_FIELDS and value is not None else value)
        for key, value in values.items()
    }


@router.get(
    "",
    response_model=BusinessListResponse,
    summary="List businesses",
    description=(
        "Directory listing ordered by name. ``search`` matches name, description, "
        "city, industry and services (case-insensitive)."
    ),
)
async def list_businesses(
    search: str | None = Query(default=None, min_length=1, max_length=200),
    industry: str | None = Query(default=None, description="Exact industry"),
    verified: bool | None = Query(default=None, description="Only verified (or unverified)"),
    db: AsyncSession = Depends(get_db),
) -> BusinessListResponse:
    """List directory entries.

    Design Decision: Search in Python
    ---------------------------------
    ``services`` is a JSON list, which has no portable ``ILIKE``. The
    directory is small, so the structured filters run in SQL and the text
    search runs over the loaded rows with ``Business.matches_search``.
    """
    query = select(Business).order_by(Business.name)
    if industry:
        query = query.where(Business.industry == industry)
    if verified is not None:
        query = query.where(Business.is_verified == verified)

    result = await db.execute(query)
    businesses = list(result.scalars().all())

    if search:
        businesses = [b for b in businesses if b.matches_search(search.strip())]

    return BusinessListResponse(
        items=[business_to_response(b) for b in businesses],
        total=len(businesses),
    )


@router.get(
    "/industries",
    response_model=IndustryListResponse,
    summary="List industries",
    description="Distinct non-empty industries, sorted alphabetically.",
)
async def list_industries(
    db: AsyncSession = Depends(get_db),
) -> IndustryListResponse:
    result = await db.execute(
        select(Business.industry)
        .where(Business.industry.is_not(None), Business.industry != "")
        .distinct()
        .order_by(Business.industry)
    )
    return IndustryListResponse(industries=list(result.scalars().all()))


@router.get(
    "/{slug}",
    response_model=BusinessResponse,
    summary="Get a business",
    responses={404: {"description": "Business not found"}},
)
async def get_business(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> BusinessResponse:
    result = await db.execute(select(Business).where(Business.slug == slug))
    business = result.scalar_one_or_none()

    if business is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Business '{slug}' not found",
        )

    return business_to_response(business)


@router.post(
    "",
    response_model=BusinessResponse,
    status_code=status.HTTP_201_CREATED,
    summary="List a business",
    description="Create a directory entry owned by the caller.",
    responses={
        201: {"description": "Business created"},
        401: {"description": "Not authenticated"},
        422: {"description": "Validation error"},
    },
)
async def create_business(
    data: CreateBusinessRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> BusinessResponse:
    slug = await unique_slug(
        db, create_slug(data.name, settings.slug_max_length) or "business", model=Business
    )

    business = Business(
        slug=slug,
        owner_id=profile.id,
        **_plain_urls(data.model_dump()),
    )
    db.add(business)
    await db.flush()
    await db.refresh(business)

    logger.info(f"Business {business.id} ({slug}) created by profile {profile.id}")
    return business_to_response(business)


@router.patch(
    "/{business_id}",
    response_model=BusinessResponse,
    summary="Update a business",
    description="Partial update. Only the owner or staff may edit.",
    responses={
        403: {"description": "Not the owner"},
        404: {"description": "Business not found"},
    },
)
async def update_business(
    business_id: int,
    data: UpdateBusinessRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> BusinessResponse:
    business = await get_business_or_404(business_id, db)
    ensure_can_manage(business, profile)

    for field, value in _plain_urls(data.model_dump(exclude_unset=True)).items():
        if field in REQUIRED_FIELDS and value is None:
            continue
        setattr(business, field, value)

    await db.flush()
    await db.refresh(business)
    return business_to_response(business)


@router.delete(
    "/{business_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a business",
    responses={
        204: {"description": "Business deleted"},
        403: {"description": "Not the owner"},
        404: {"description": "Business not found"},
    },
)
async def delete_business(
    business_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> Response:
    business = await get_business_or_404(business_id, db)
    ensure_can_manage(business, profile)

    await db.delete(business)
    await db.flush()

    logger.info(f"Business {business_id} deleted by profile {profile.id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{business_id}/discover-images",
    response_model=BusinessResponse,
    summary="Pick logo and cover from the business website",
    description=(
        "Fetch the business homepage and fill ``logo_url`` / ``cover_image_url`` "
        "when they are empty."
    ),
    responses={
        400: {"description": "Business has no website"},
        403: {"description": "Not the owner"},
        404: {"description": "Business not found"},
        502: {"description": "Website could not be fetched"},
    },
)
async def discover_business_images(
    business_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> BusinessResponse:
    business = await get_business_or_404(business_id, db)
    ensure_can_manage(business, profile)

    if not business.website_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Business has no website URL",
        )

    try:
        content, final_url = await ExtractionPipeline().fetch(business.website_url)
    except ExtractionError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Could not fetch {business.website_url}: {e}",
        ) from e

    images = extract_business_images(content.decode("utf-8", errors="replace"), final_url)
    business.logo_url = business.logo_url or images.logo_url
    business.cover_image_url = business.cover_image_url or images.cover_url

    await db.flush()
    await db.refresh(business)
    return business_to_response(business)
