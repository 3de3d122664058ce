"""Advertisement endpoints.

Design Decisions:

1. Who Places Ads:
   - Business owners place ads for their own businesses; they start as
     ``pending_approval`` and only staff change ``status``
   - Staff may place ads for any business, active by default

2. Serving:
   - ``GET /api/v1/advertisements`` returns only running ads: active and
     inside ``[start_date, end_date)``
   - The schedule check runs in Python over the active rows, the same way
     the business directory search does
   - Impressions and clicks are counted with single UPDATE statements
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import get_current_profile
from herald_service.database import ensure_utc, get_db, utc_now
from herald_service.models import Advertisement, Profile
from herald_service.routers.businesses import ensure_can_manage, get_business_or_404
from herald_service.schemas.advertisement import (
    AdPosition,
    AdvertisementListResponse,
    AdvertisementResponse,
    CreateAdvertisementRequest,
    UpdateAdvertisementRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/advertisements",
    tags=["advertisements"],
)

URL_FIELDS = ("image_url", "link_url")
REQUIRED_FIELDS = ("title", "image_url", "position", "start_date", "status")


def ad_to_response(ad: Advertisement) -> AdvertisementResponse:
    return AdvertisementResponse.model_validate(ad)


def _plain_urls(values: dict) -> dict:
    return {
        key: (str(value) if key in URL_FIELDS and value is not None else value)
        for key, value in values.items()
    }


def ensure_valid_schedule(start: datetime, end: datetime | None) -> None:
    if end is not None and ensure_utc(end) <= ensure_utc(start):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end_date must be after start_date",
        )


def ensure_status_change_allowed(profile: Profile) -> None:
    if not profile.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only staff can change advertisement status",
        )


async def get_ad_or_404(ad_id: int, db: AsyncSession) -> Advertisement:
    ad = await db.get(Advertisement, ad_id)
    if ad is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Advertisement with id {ad_id} not found",
        )
    return ad


async def get_running_ad_or_404(ad_id: int, db: AsyncSession) -> Advertisement:
    ad = await db.get(Advertisement, ad_id)
    if ad is None or not ad.is_running():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Advertisement with id {ad_id} is not running",
        )
    return ad


@router.get(
    "",
    response_model=AdvertisementListResponse,
    summary="List running advertisements",
    description="Active ads inside their schedule, newest start first.",
)
async def list_running_ads(
    position: AdPosition | None = Query(default=None, description="Only this placement"),
    db: AsyncSession = Depends(get_db),
) -> AdvertisementListResponse:
    query = (
        select(Advertisement)
        .where(Advertisement.status == "active")
        .order_by(Advertisement.start_date.desc(), Advertisement.id.desc())
    )
    if position:
        query = query.where(Advertisement.position == position)

    result = await db.execute(query)
    now = utc_now()
    ads = [ad for ad in result.scalars().all() if ad.is_running(now)]

    return AdvertisementListResponse(items=[ad_to_response(a) for a in ads], total=len(ads))


@router.get(
    "/business/{business_id}",
    response_model=AdvertisementListResponse,
    summary="List a business's advertisements",
    description="Every ad of the business in any status. Owner or staff only.",
    responses={
        403: {"description": "Not the owner"},
        404: {"description": "Business not found"},
    },
)
async def list_business_ads(
    business_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> AdvertisementListResponse:
    business = await get_business_or_404(business_id, db)
    ensure_can_manage(business, profile)

    result = await db.execute(
        select(Advertisement)
        .where(Advertisement.business_id == business_id)
        .order_by(Advertisement.start_date.desc(), Advertisement.id.desc())
    )
    ads = result.scalars().all()
    return AdvertisementListResponse(items=[ad_to_response(a) for a in ads], total=len(ads))


@router.post(
    "",
    response_model=AdvertisementResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an advertisement",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Not the business owner, or status set by non-staff"},
        404: {"description": "Business not found"},
        422: {"description": "Validation error"},
    },
)
async def create_ad(
    data: CreateAdvertisementRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> AdvertisementResponse:
    business = await get_business_or_404(data.business_id, db)
    ensure_can_manage(business, profile)
    ensure_valid_schedule(data.start_date, data.end_date)

    values = _plain_urls(data.model_dump())
    requested_status = values.pop("status")
    if requested_status is not None:
        ensure_status_change_allowed(profile)
    default_status = "active" if profile.is_staff else "pending_approval"

    ad = Advertisement(**values, status=requested_status or default_status)
    db.add(ad)
    await db.flush()
    await db.refresh(ad)

    logger.info(f"Advertisement {ad.id} placed for business {business.id} by {profile.id}")
    return ad_to_response(ad)


@router.patch(
    "/{ad_id}",
    response_model=AdvertisementResponse,
    summary="Update an advertisement",
    responses={
        403: {"description": "Not the business owner, or status set by non-staff"},
        404: {"description": "Advertisement not found"},
    },
)
async def update_ad(
    ad_id: int,
    data: UpdateAdvertisementRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> AdvertisementResponse:
    ad = await get_ad_or_404(ad_id, db)
    ensure_can_manage(ad.business, profile)

    updates = {
        field: value
        for field, value in _plain_urls(data.model_dump(exclude_unset=True)).items()
        if not (field in REQUIRED_FIELDS and value is None)
    }
    if "status" in updates and updates["status"] != ad.status:
        ensure_status_change_allowed(profile)
    ensure_valid_schedule(
        updates.get("start_date", ad.start_date),
        updates["end_date"] if "end_date" in updates else ad.end_date,
    )

    for field, value in updates.items():
        setattr(ad, field, value)

    await db.flush()
    await db.refresh(ad)
    return ad_to_response(ad)


@router.delete(
    "/{ad_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an advertisement",
    responses={
        403: {"description": "Not the business owner"},
        404: {"description": "Advertisement not found"},
    },
)
async def delete_ad(
    ad_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> Response:
    ad = await get_ad_or_404(ad_id, db)
    ensure_can_manage(ad.business, profile)

    await db.delete(ad)
    await db.flush()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{ad_id}/impression",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Record an impression",
    responses={404: {"description": "Advertisement not running"}},
)
async def record_impression(
    ad_id: int,
    db: AsyncSession = Depends(get_db),
) -> Response:
    await get_running_ad_or_404(ad_id, db)
    await db.execute(
        update(Advertisement)
        .where(Advertisement.id == ad_id)
        .values(impressions=Advertisement.impressions + 1)
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{ad_id}/click",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Record a click-through",
    responses={404: {"description": "Advertisement not running"}},
)
async def record_click(
    ad_id: int,
    db: AsyncSession = Depends(get_db),
) -> Response:
    await get_running_ad_or_404(ad_id, db)
    await db.execute(
        update(Advertisement)
        .where(Advertisement.id == ad_id)
        .values(clicks=Advertisement.clicks + 1)
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
