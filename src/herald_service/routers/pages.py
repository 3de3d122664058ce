"""Static page API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import require_staff
from herald_service.database import get_db
from herald_service.models import Page, Profile
from herald_service.schemas.page import CreatePageRequest, MenuItem, PageResponse, UpdatePageRequest

router = APIRouter(
    prefix="/api/v1/pages",
    tags=["pages"],
)

NON_NULLABLE = (
    "title",
    "page_type",
    "meta_keywords",
    "template_name",
    "is_published",
    "is_in_menu",
    "menu_order",
    "seo_schema",
)


@router.get(
    "/menu",
    response_model=list[MenuItem],
    summary="Navigation menu",
    description="Published pages flagged for the menu, in menu order.",
)
async def get_menu(
    db: AsyncSession = Depends(get_db),
) -> list[MenuItem]:
    result = await db.execute(
        select(Page)
        .where(Page.is_published.is_(True), Page.is_in_menu.is_(True))
        .order_by(Page.menu_order, Page.title)
    )
    return [MenuItem.model_validate(p) for p in result.scalars().all()]


@router.get(
    "/{slug}",
    response_model=PageResponse,
    summary="Get a published page",
    responses={404: {"description": "Page not found or not published"}},
)
async def get_page(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> PageResponse:
    result = await db.execute(
        select(Page).where(Page.slug == slug, Page.is_published.is_(True))
    )
    page = result.scalar_one_or_none()

    if page is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Page '{slug}' not found",
        )

    return PageResponse.model_validate(page)


@router.post(
    "",
    response_model=PageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a page (staff)",
    responses={
        403: {"description": "Staff only"},
        409: {"description": "Slug already in use"},
    },
)
async def create_page(
    data: CreatePageRequest,
    staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> PageResponse:
    existing = await db.execute(select(Page.id).where(Page.slug == data.slug))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Page '{data.slug}' already exists",
        )

    page = Page(**data.model_dump(), created_by=staff.id, updated_by=staff.id)
    db.add(page)
    await db.flush()
    await db.refresh(page)

    return PageResponse.model_validate(page)


@router.patch(
    "/{page_id}",
    response_model=PageResponse,
    summary="Update a page (staff)",
    responses={
        403: {"description": "Staff only"},
        404: {"description": "Page not found"},
    },
)
async def update_page(
    page_id: int,
    data: UpdatePageRequest,
    staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> PageResponse:
    page = await db.get(Page, page_id)
    if page is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Page with id {page_id} not found",
        )

    for field, value in data.model_dump(exclude_unset=True).items():
        if field in NON_NULLABLE and value is None:
            continue
        setattr(page, field, value)
    page.updated_by = staff.id

    await db.flush()
    await db.refresh(page)
    return PageResponse.model_validate(page)
