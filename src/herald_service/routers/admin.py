"""Admin endpoints for background tasks and editorial queues.

Design Decisions:

1. Endpoint Structure:
   - GET  /api/v1/admin/tasks                      - Recent tasks
   - GET  /api/v1/admin/tasks/{task_id}            - Polling snapshot
   - GET  /api/v1/admin/tasks/{task_id}/progress   - SSE stream
   - POST /api/v1/admin/tasks/{task_id}/cancel     - Cooperative cancel
   - GET  /api/v1/admin/articles?status=draft      - Editorial queue
   Tasks are started by the owning resource (``POST /api/v1/rss/ingest``)

2. SSE vs Polling:
   - Both are offered; SSE for live progress bars, polling as fallback

3. Access:
   - Staff only (admins and editors)
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from herald_service.auth import require_staff
from herald_service.database import get_db
from herald_service.models import Article
from herald_service.routers.articles import article_to_response
from herald_service.schemas.admin import CancelTaskResponse, TaskStatusResponse
from herald_service.schemas.article import ArticleListResponse, ArticleStatus
from herald_service.tasks import TaskProgress, task_registry

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    dependencies=[Depends(require_staff)],
)


def task_to_response(task: TaskProgress) -> TaskStatusResponse:
    return TaskStatusResponse(
        task_id=task.task_id,
        task_type=task.task_type,
        status=task.status,
        total_items=task.total_items,
        processed_items=task.processed_items,
        failed_items=task.failed_items,
        progress_percent=task.progress_percent(),
        message=task.message,
        errors=task.errors,
    )


def get_task_or_404(task_id: str) -> TaskProgress:
    task = task_registry.get_task(task_id)
    if task is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task {task_id} not found",
        )
    return task


@router.get(
    "/tasks",
    response_model=list[TaskStatusResponse],
    summary="List background tasks",
    description="Tasks known to this process, newest first.",
)
async def list_tasks() -> list[TaskStatusResponse]:
    return [task_to_response(t) for t in task_registry.list_tasks()]


@router.get(
    "/tasks/{task_id}",
    response_model=TaskStatusResponse,
    summary="Task status (polling)",
    responses={404: {"description": "Task not found"}},
)
async def get_task_status(task_id: str) -> TaskStatusResponse:
    return task_to_response(get_task_or_404(task_id))


@router.get(
    "/tasks/{task_id}/progress",
    summary="Task progress stream (SSE)",
    responses={404: {"description": "Task not found"}},
)
async def stream_task_progress(task_id: str) -> EventSourceResponse:
    """Stream task progress as Server-Sent Events.

    SSE Event Format:
    - event: "progress" | "complete" | "error" | "cancelled"
    - data: JSON-serialized TaskProgress

    The stream ends after the first terminal event.

    Client Usage (JavaScript):
        const source = new EventSource('/api/v1/admin/tasks/<id>/progress');
        source.addEventListener('progress', (e) => render(JSON.parse(e.data)));
        source.addEventListener('complete', () => source.close());
    """
    get_task_or_404(task_id)

    async def event_generator() -> AsyncGenerator[dict[str, str], None]:
        async for progress in task_registry.stream_progress(task_id):
            if progress.status == "completed":
                event_type = "complete"
            elif progress.status == "failed":
                event_type = "error"
            elif progress.status == "cancelled":
                event_type = "cancelled"
            else:
                event_type = "progress"

            yield {
                "event": event_type,
                "data": progress.model_dump_json(),
            }

    return EventSourceResponse(event_generator())


@router.post(
    "/tasks/{task_id}/cancel",
    response_model=CancelTaskResponse,
    summary="Cancel a task",
    description=(
        "Sets a cancellation flag. The task stops before its next unit of work; "
        "work already done is kept."
    ),
    responses={404: {"description": "Task not found"}},
)
async def cancel_task(task_id: str) -> CancelTaskResponse:
    get_task_or_404(task_id)
    return CancelTaskResponse(task_id=task_id, cancelled=task_registry.cancel_task(task_id))


@router.get(
    "/articles",
    response_model=ArticleListResponse,
    summary="Articles by status (editorial queue)",
    description="Non-deleted articles in any status, most recently updated first.",
)
async def list_articles_by_status(
    status_filter: ArticleStatus | None = Query(
        default=None,
        alias="status",
        description="Filter by article status",
    ),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> ArticleListResponse:
    query = select(Article).where(Article.deleted_at.is_(None))
    if status_filter:
        query = query.where(Article.status == status_filter)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
    result = await db.execute(
        query.order_by(Article.updated_at.desc(), Article.id.desc()).limit(limit).offset(offset)
    )

    return ArticleListResponse(
        items=[article_to_response(a) for a in result.scalars().all()],
        total=total,
        limit=limit,
        offset=offset,
    )
