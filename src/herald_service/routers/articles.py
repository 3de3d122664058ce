"""Article API endpoints.

Design Decisions:

1. Slug Addressing for Reads, IDs for Writes:
   - Public reads use ``/{slug}`` (stable, human-readable URLs)
   - Writes use ``/{article_id}`` because editors may change the slug

2. Visibility:
   - Anonymous reads only see ``published`` and ``featured`` articles that
     are not soft-deleted; drafts are reachable through ``/profiles/me/articles``
     and the admin listing

3. Permissions:
   - Create: authors, editors, admins
   - Update / delete: the article's author, or staff
   - Publish (any status change beyond draft/scheduled): staff only
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import get_current_profile, require_author, require_staff
from herald_service.config import settings
from herald_service.content import create_slug, estimate_reading_time, extract_excerpt
from herald_service.database import get_db, utc_now
from herald_service.models import PUBLIC_STATUSES, Article, Category, Profile, Tag
from herald_service.rss.processor import get_or_create_tags, unique_slug
from herald_service.schemas.article import (
    ArticleListResponse,
    ArticleResponse,
    CreateArticleRequest,
    EngagementResponse,
    PublishArticleRequest,
    UpdateArticleRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/articles",
    tags=["articles"],
)


def article_to_response(article: Article) -> ArticleResponse:
    return ArticleResponse.model_validate(article)


def public_articles() -> Select[tuple[Article]]:
    """Base query for articles visible to anonymous readers."""
    return select(Article).where(
        Article.status.in_(PUBLIC_STATUSES),
        Article.deleted_at.is_(None),
    )


async def get_public_article_or_404(slug: str, db: AsyncSession) -> Article:
    """Fetch a published article by slug or raise 404."""
    result = await db.execute(public_articles().where(Article.slug == slug))
    article = result.scalar_one_or_none()

    if article is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Article '{slug}' not found",
        )

    return article


async def get_article_or_404(article_id: int, db: AsyncSession) -> Article:
    """Fetch a non-deleted article by ID (any status) or raise 404.

    Uses ``populate_existing`` so relationships changed in this session
    are reloaded.
    """
    result = await db.execute(
        select(Article)
        .where(Article.id == article_id, Article.deleted_at.is_(None))
        .execution_options(populate_existing=True)
    )
    article = result.scalar_one_or_none()

    if article is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Article with id {article_id} not found",
        )

    return article


def ensure_can_edit(article: Article, profile: Profile) -> None:
    """Raise 403 unless ``profile`` wrote the article or is staff."""
    if profile.is_staff or article.author_id == profile.id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You can only modify your own articles",
    )


async def get_category_or_400(category_id: int, db: AsyncSession) -> Category:
    category = await db.get(Category, category_id)
    if category is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Category with id {category_id} does not exist",
        )
    return category


async def slug_taken(db: AsyncSession, slug: str, exclude_id: int | None = None) -> bool:
    query = select(Article.id).where(Article.slug == slug)
    if exclude_id is not None:
        query = query.where(Article.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


@router.get(
    "",
    response_model=ArticleListResponse,
    summary="List published articles",
    description="Published articles, newest first, with optional category, tag and text filters.",
    responses={
        200: {"description": "Page of articles"},
    },
)
async def list_articles(
    category: str | None = Query(default=None, description="Category slug"),
    tag: str | None = Query(default=None, description="Tag slug"),
    search: str | None = Query(
        default=None,
        min_length=1,
        max_length=200,
        description="Case-insensitive match on title, excerpt and content",
    ),
    limit: int = Query(default=settings.articles_page_size, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> ArticleListResponse:
    """List published articles.

    Args:
        category: Category slug filter
        tag: Tag slug filter
        search: Free-text filter
        limit: Page size
        offset: Page offset
        db: Database session

    Returns:
        Page of articles with the total match count
    """
    query = public_articles()

    if category:
        query = query.where(Article.category.has(Category.slug == category))
    if tag:
        query = query.where(Article.tags.any(Tag.slug == tag))
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Article.title.ilike(pattern),
                Article.excerpt.ilike(pattern),
                Article.content.ilike(pattern),
            )
        )

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    result = await db.execute(
        query.order_by(Article.published_at.desc(), Article.id.desc()).limit(limit).offset(offset)
    )
    articles = result.scalars().all()

    return ArticleListResponse(
        items=[article_to_response(a) for a in articles],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{slug}",
    response_model=ArticleResponse,
    summary="Get a published article",
    description="Fetch a published article by slug. Each read increments the view counter.",
    responses={
        200: {"description": "Article found"},
        404: {"description": "Article not found or not published"},
    },
)
async def get_article(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> ArticleResponse:
    article = await get_public_article_or_404(slug, db)
    article.views += 1
    await db.flush()
    return article_to_response(article)


@router.get(
    "/{slug}/related",
    response_model=list[ArticleResponse],
    summary="Related articles",
    description=(
        "Latest published articles in the same category, excluding the current one. "
        "Falls back to the latest articles overall when the category has too few."
    ),
    responses={
        404: {"description": "Article not found or not published"},
    },
)
async def get_related_articles(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> list[ArticleResponse]:
    article = await get_public_article_or_404(slug, db)
    limit = settings.related_articles_limit
    newest_first = (Article.published_at.desc(), Article.id.desc())

    related: list[Article] = []
    if article.category_id is not None:
        result = await db.execute(
            public_articles()
            .where(Article.category_id == article.category_id, Article.id != article.id)
            .order_by(*newest_first)
            .limit(limit)
        )
        related.extend(result.scalars().all())

    if len(related) < limit:
        exclude = [article.id, *(a.id for a in related)]
        result = await db.execute(
            public_articles()
            .where(Article.id.not_in(exclude))
            .order_by(*newest_first)
            .limit(limit - len(related))
        )
        related.extend(result.scalars().all())

    return [article_to_response(a) for a in related]


async def _bump_counter(slug: str, field: str, db: AsyncSession) -> EngagementResponse:
    article = await get_public_article_or_404(slug, db)
    setattr(article, field, getattr(article, field) + 1)
    await db.flush()
    return EngagementResponse(
        id=article.id,
        views=article.views,
        likes=article.likes,
        shares=article.shares,
    )


@router.post(
    "/{slug}/like",
    response_model=EngagementResponse,
    summary="Like an article",
    responses={404: {"description": "Article not found or not published"}},
)
async def like_article(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> EngagementResponse:
    return await _bump_counter(slug, "likes", db)


@router.post(
    "/{slug}/share",
    response_model=EngagementResponse,
    summary="Record a share",
    responses={404: {"description": "Article not found or not published"}},
)
async def share_article(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> EngagementResponse:
    return await _bump_counter(slug, "shares", db)


@router.post(
    "",
    response_model=ArticleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Write an article",
    description=(
        "Create a draft or scheduled article credited to the caller. "
        "Requires the author, editor or admin role."
    ),
    responses={
        201: {"description": "Article created"},
        400: {"description": "Unknown category"},
        401: {"description": "Not authenticated"},
        403: {"description": "Role cannot write articles"},
        409: {"description": "Slug already in use"},
        422: {"description": "Validation error"},
    },
)
async def create_article(
    data: CreateArticleRequest,
    profile: Profile = Depends(require_author),
    db: AsyncSession = Depends(get_db),
) -> ArticleResponse:
    """Create an article.

    Slug handling:
    - Explicit slug: must be unused, otherwise 409
    - No slug: derived from the title; collisions get ``-1``, ``-2``, ...

    Args:
        data: Article fields (already sanitized by the schema)
        profile: Authenticated author
        db: Database session

    Returns:
        Created article
    """
    if data.category_id is not None:
        await get_category_or_400(data.category_id, db)

    if data.slug:
        if await slug_taken(db, data.slug):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Slug '{data.slug}' is already in use",
            )
        slug = data.slug
    else:
        slug = await unique_slug(db, create_slug(data.title, settings.slug_max_length) or "article")

    article = Article(
        title=data.title,
        slug=slug,
        subtitle=data.subtitle,
        excerpt=data.excerpt or extract_excerpt(data.content),
        content=data.content,
        featured_image_url=str(data.featured_image_url) if data.featured_image_url else None,
        status=data.status,
        author_id=profile.id,
        category_id=data.category_id,
        location_name=data.location_name,
        seo_title=data.seo_title,
        seo_description=data.seo_description,
        read_time_minutes=estimate_reading_time(data.content),
        article_metadata={"source": "editor"},
    )
    article.tags = await get_or_create_tags(db, data.tags)

    db.add(article)
    await db.flush()

    logger.info(f"Article {article.id} ({slug}) created by profile {profile.id}")
    return article_to_response(await get_article_or_404(article.id, db))


@router.patch(
    "/{article_id}",
    response_model=ArticleResponse,
    summary="Update an article",
    description="Partial update. Only the author or staff may edit.",
    responses={
        200: {"description": "Article updated"},
        400: {"description": "Unknown category"},
        403: {"description": "Not the author"},
        404: {"description": "Article not found"},
        409: {"description": "Slug already in use"},
    },
)
async def update_article(
    article_id: int,
    data: UpdateArticleRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> ArticleResponse:
    article = await get_article_or_404(article_id, db)
    ensure_can_edit(article, profile)

    updates = data.model_dump(exclude_unset=True)

    if "slug" in updates and updates["slug"] != article.slug:
        if await slug_taken(db, updates["slug"], exclude_id=article.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Slug '{updates['slug']}' is already in use",
            )
    if updates.get("category_id") is not None:
        await get_category_or_400(updates["category_id"], db)

    if "tags" in updates:
        article.tags = await get_or_create_tags(db, updates.pop("tags") or [])
    if "featured_image_url" in updates:
        url = updates.pop("featured_image_url")
        article.featured_image_url = str(url) if url else None
    if updates.get("content") is not None:
        article.read_time_minutes = estimate_reading_time(updates["content"])

    for field, value in updates.items():
        if field in ("title", "content", "slug") and value is None:
            continue
        setattr(article, field, value)

    await db.flush()
    return article_to_response(await get_article_or_404(article.id, db))


@router.post(
    "/{article_id}/publish",
    response_model=ArticleResponse,
    summary="Change article status (staff)",
    description=(
        "Set any status. Publishing stamps ``published_at`` with the given time "
        "or now when the article has none."
    ),
    responses={
        403: {"description": "Staff only"},
        404: {"description": "Article not found"},
    },
)
async def publish_article(
    article_id: int,
    data: PublishArticleRequest,
    profile: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ArticleResponse:
    article = await get_article_or_404(article_id, db)

    article.status = data.status
    if data.published_at is not None:
        article.published_at = data.published_at
    elif data.status in PUBLIC_STATUSES and article.published_at is None:
        article.published_at = utc_now()

    await db.flush()
    logger.info(f"Article {article.id} set to {data.status} by profile {profile.id}")
    return article_to_response(await get_article_or_404(article.id, db))


@router.delete(
    "/{article_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an article",
    description="Soft delete (sets deleted_at). Only the author or staff may delete.",
    responses={
        204: {"description": "Article deleted"},
        403: {"description": "Not the author"},
        404: {"description": "Article not found"},
    },
)
async def delete_article(
    article_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> Response:
    article = await get_article_or_404(article_id, db)
    ensure_can_edit(article, profile)

    article.deleted_at = utc_now()
    await db.flush()

    return Response(status_code=status.HTTP_204_NO_CONTENT)
