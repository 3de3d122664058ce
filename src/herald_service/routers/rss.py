"""RSS source administration endpoints (staff only).

Design Decisions:

1. Two Ways to Fetch:
   - ``POST /{source_id}/fetch`` processes one source inside the request
     and returns its fetch log (quick check after adding a feed)
   - ``POST /ingest`` runs every due source as a background task tracked by
     the task registry; progress is read from ``/api/v1/admin/tasks``

2. One Run at a Time:
   - A new ingestion is refused (409) while another is pending or running,
     or while any source is being fetched on demand
   - Fetching a source on demand is refused while an ingestion runs or the
     same source is already being fetched
   - Guards are per process, like the task registry

3. Database Session Factory:
   - The background task receives a session factory (``get_session_factory``
     dependency), never the request session, which closes with the response
"""

import logging
from collections.abc import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import require_staff
from herald_service.database import get_db, get_session_factory
from herald_service.models import Category, RSSFetchLog, RSSSource
from herald_service.rss.processor import get_due_sources, process_source
from herald_service.schemas.admin import StartIngestionResponse
from herald_service.schemas.rss import (
    CreateRSSSourceRequest,
    RSSFetchLogListResponse,
    RSSFetchLogResponse,
    RSSSourceListResponse,
    RSSSourceResponse,
    UpdateRSSSourceRequest,
)
from herald_service.tasks import run_rss_ingestion, task_registry
from herald_service.tasks.rss_ingestion import TASK_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/rss",
    tags=["rss"],
    dependencies=[Depends(require_staff)],
)

URL_FIELDS = ("feed_url", "website_url")
NULLABLE_FIELDS = ("description", "website_url", "category_id", "default_author_id")

# Sources currently processed by ``fetch_source_now``
_sources_being_fetched: set[int] = set()


def source_to_response(source: RSSSource) -> RSSSourceResponse:
    return RSSSourceResponse.model_validate(source)


async def get_source_or_404(source_id: int, db: AsyncSession) -> RSSSource:
    source = await db.get(RSSSource, source_id)
    if source is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"RSS source with id {source_id} not found",
        )
    return source


async def ensure_feed_url_free(
    db: AsyncSession, feed_url: str, exclude_id: int | None = None
) -> None:
    query = select(RSSSource.id).where(RSSSource.feed_url == feed_url)
    if exclude_id is not None:
        query = query.where(RSSSource.id != exclude_id)
    result = await db.execute(query)
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A source for {feed_url} already exists",
        )


async def ensure_category_exists(db: AsyncSession, category_id: int | None) -> None:
    if category_id is not None and await db.get(Category, category_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Category with id {category_id} does not exist",
        )


def _plain_urls(values: dict) -> dict:
    return {
        key: (str(value) if key in URL_FIELDS and value is not None else value)
        for key, value in values.items()
    }


@router.get(
    "",
    response_model=RSSSourceListResponse,
    summary="List RSS sources",
)
async def list_sources(
    db: AsyncSession = Depends(get_db),
) -> RSSSourceListResponse:
    result = await db.execute(select(RSSSource).order_by(RSSSource.name))
    sources = result.scalars().all()
    return RSSSourceListResponse(
        items=[source_to_response(s) for s in sources],
        total=len(sources),
    )


@router.post(
    "",
    response_model=RSSSourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an RSS source",
    responses={
        400: {"description": "Unknown category"},
        409: {"description": "Feed URL already configured"},
    },
)
async def create_source(
    data: CreateRSSSourceRequest,
    db: AsyncSession = Depends(get_db),
) -> RSSSourceResponse:
    values = _plain_urls(data.model_dump())
    await ensure_feed_url_free(db, values["feed_url"])
    await ensure_category_exists(db, data.category_id)

    source = RSSSource(**values)
    db.add(source)
    await db.flush()
    await db.refresh(source)

    logger.info(f"RSS source {source.id} added: {source.feed_url}")
    return source_to_response(source)


@router.post(
    "/ingest",
    response_model=StartIngestionResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start RSS ingestion",
    responses={409: {"description": "Another RSS fetch is in progress"}},
    description=(
        "Fetch every due source in the background. Poll "
        "``/api/v1/admin/tasks/{task_id}`` or stream ``progress_url``."
    ),
)
async def start_ingestion(
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: Callable[[], AsyncSession] = Depends(get_session_factory),
) -> StartIngestionResponse:
    """Queue an ingestion run.

    The task is created even when nothing is due; it completes immediately
    with zero items so clients handle a single response shape.
    """
    due = await get_due_sources(db)
    if task_registry.active_tasks(TASK_TYPE) or _sources_being_fetched:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An RSS fetch is already in progress",
        )
    task_id = task_registry.create_task(TASK_TYPE, total_items=len(due))

    background_tasks.add_task(
        run_rss_ingestion,
        task_id=task_id,
        task_registry=task_registry,
        session_factory=session_factory,
    )

    logger.info(f"RSS ingestion started: task_id={task_id}, sources_due={len(due)}")
    return StartIngestionResponse(
        task_id=task_id,
        sources_due=len(due),
        progress_url=f"/api/v1/admin/tasks/{task_id}/progress",
    )


@router.get(
    "/{source_id}",
    response_model=RSSSourceResponse,
    summary="Get an RSS source",
    responses={404: {"description": "Source not found"}},
)
async def get_source(
    source_id: int,
    db: AsyncSession = Depends(get_db),
) -> RSSSourceResponse:
    return source_to_response(await get_source_or_404(source_id, db))


@router.patch(
    "/{source_id}",
    response_model=RSSSourceResponse,
    summary="Update an RSS source",
    responses={
        400: {"description": "Unknown category"},
        404: {"description": "Source not found"},
        409: {"description": "Feed URL already configured"},
    },
)
async def update_source(
    source_id: int,
    data: UpdateRSSSourceRequest,
    db: AsyncSession = Depends(get_db),
) -> RSSSourceResponse:
    source = await get_source_or_404(source_id, db)
    updates = _plain_urls(data.model_dump(exclude_unset=True))

    if updates.get("feed_url"):
        await ensure_feed_url_free(db, updates["feed_url"], exclude_id=source.id)
    if "category_id" in updates:
        await ensure_category_exists(db, updates["category_id"])

    for field, value in updates.items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(source, field, value)

    await db.flush()
    await db.refresh(source)
    return source_to_response(source)


@router.delete(
    "/{source_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an RSS source",
    description="Imported articles are kept; tracking rows and fetch logs go with the source.",
    responses={404: {"description": "Source not found"}},
)
async def delete_source(
    source_id: int,
    db: AsyncSession = Depends(get_db),
) -> Response:
    source = await get_source_or_404(source_id, db)
    await db.delete(source)
    await db.flush()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{source_id}/fetch",
    response_model=RSSFetchLogResponse,
    summary="Fetch one source now",
    description="Process the source inside the request, regardless of its schedule.",
    responses={
        404: {"description": "Source not found"},
        409: {"description": "Ingestion running or source already being fetched"},
    },
)
async def fetch_source_now(
    source_id: int,
    db: AsyncSession = Depends(get_db),
) -> RSSFetchLogResponse:
    source = await get_source_or_404(source_id, db)
    if task_registry.active_tasks(TASK_TYPE) or source.id in _sources_being_fetched:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"RSS source {source.id} is already being fetched",
        )

    _sources_being_fetched.add(source.id)
    try:
        await process_source(db, source)
        await db.commit()
    finally:
        _sources_being_fetched.discard(source.id)

    result = await db.execute(
        select(RSSFetchLog)
        .where(RSSFetchLog.rss_source_id == source.id)
        .order_by(RSSFetchLog.id.desc())
        .limit(1)
    )
    return RSSFetchLogResponse.model_validate(result.scalar_one())


@router.get(
    "/{source_id}/logs",
    response_model=RSSFetchLogListResponse,
    summary="Fetch history of a source",
    responses={404: {"description": "Source not found"}},
)
async def list_fetch_logs(
    source_id: int,
    limit: int = Query(default=20, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> RSSFetchLogListResponse:
    await get_source_or_404(source_id, db)

    result = await db.execute(
        select(RSSFetchLog)
        .where(RSSFetchLog.rss_source_id == source_id)
        .order_by(RSSFetchLog.fetch_started_at.desc(), RSSFetchLog.id.desc())
        .limit(limit)
    )
    total = (
        await db.execute(
            select(func.count(RSSFetchLog.id)).where(RSSFetchLog.rss_source_id == source_id)
        )
    ).scalar() or 0

    return RSSFetchLogListResponse(
        items=[RSSFetchLogResponse.model_validate(log) for log in result.scalars().all()],
        total=total,
    )
