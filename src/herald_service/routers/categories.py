"""Category and tag API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import require_staff
from herald_service.config import settings
from herald_service.content import create_slug
from herald_service.database import get_db
from herald_service.models import Article, Category, Profile, Tag
from herald_service.routers.articles import article_to_response, public_articles
from herald_service.schemas.article import ArticleListResponse
from herald_service.schemas.category import (
    CategoryListResponse,
    CategoryResponse,
    CreateCategoryRequest,
    CreateTagRequest,
    TagListResponse,
    TagResponse,
)

router = APIRouter(
    prefix="/api/v1/categories",
    tags=["categories"],
)

tags_router = APIRouter(
    prefix="/api/v1/tags",
    tags=["tags"],
)


async def get_category_by_slug_or_404(slug: str, db: AsyncSession) -> Category:
    result = await db.execute(select(Category).where(Category.slug == slug))
    category = result.scalar_one_or_none()

    if category is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category '{slug}' not found",
        )

    return category


@router.get(
    "",
    response_model=CategoryListResponse,
    summary="List categories",
)
async def list_categories(
    db: AsyncSession = Depends(get_db),
) -> CategoryListResponse:
    result = await db.execute(select(Category).order_by(Category.name))
    categories = result.scalars().all()
    return CategoryListResponse(
        items=[CategoryResponse.model_validate(c) for c in categories],
        total=len(categories),
    )


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category (staff)",
    responses={
        403: {"description": "Staff only"},
        409: {"description": "Name or slug already in use"},
    },
)
async def create_category(
    data: CreateCategoryRequest,
    _staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    slug = data.slug or create_slug(data.name, settings.slug_max_length)
    if not slug:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot derive a slug from the category name",
        )

    result = await db.execute(
        select(Category.id).where(or_(Category.slug == slug, Category.name == data.name))
    )
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Category '{data.name}' already exists",
        )

    category = Category(
        name=data.name,
        slug=slug,
        description=data.description,
        color=data.color,
        keywords=data.keywords,
    )
    db.add(category)
    await db.flush()
    await db.refresh(category)

    return CategoryResponse.model_validate(category)


@router.get(
    "/{slug}",
    response_model=CategoryResponse,
    summary="Get a category",
    responses={404: {"description": "Category not found"}},
)
async def get_category(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    return CategoryResponse.model_validate(await get_category_by_slug_or_404(slug, db))


@router.get(
    "/{slug}/articles",
    response_model=ArticleListResponse,
    summary="Published articles in a category",
    responses={404: {"description": "Category not found"}},
)
async def list_category_articles(
    slug: str,
    limit: int = Query(default=settings.articles_page_size, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> ArticleListResponse:
    category = await get_category_by_slug_or_404(slug, db)
    query = public_articles().where(Article.category_id == category.id)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
    result = await db.execute(
        query.order_by(Article.published_at.desc(), Article.id.desc()).limit(limit).offset(offset)
    )

    return ArticleListResponse(
        items=[article_to_response(a) for a in result.scalars().all()],
        total=total,
        limit=limit,
        offset=offset,
    )


# =============================================================================
# Tags
# =============================================================================


@tags_router.get(
    "",
    response_model=TagListResponse,
    summary="List tags",
)
async def list_tags(
    db: AsyncSession = Depends(get_db),
) -> TagListResponse:
    result = await db.execute(select(Tag).order_by(Tag.name))
    tags = result.scalars().all()
    return TagListResponse(
        items=[TagResponse.model_validate(t) for t in tags],
        total=len(tags),
    )


@tags_router.post(
    "",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tag (staff)",
    responses={
        403: {"description": "Staff only"},
        409: {"description": "Tag slug already in use"},
    },
)
async def create_tag(
    data: CreateTagRequest,
    _staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    slug = create_slug(data.name, settings.slug_max_length)
    if not slug:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot derive a slug from the tag name",
        )

    result = await db.execute(select(Tag.id).where(Tag.slug == slug))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Tag '{slug}' already exists",
        )

    tag = Tag(name=data.name, slug=slug)
    db.add(tag)
    await db.flush()
    await db.refresh(tag)

    return TagResponse.model_validate(tag)
