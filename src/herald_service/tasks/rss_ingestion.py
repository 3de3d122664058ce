"""RSS ingestion as a tracked admin background task.

Design Decisions:

1. Session Factory:
   - The task opens its own session from ``session_factory`` instead of
     reusing the request session, which is closed once the response is sent
   - Tests pass a factory bound to their in-memory database

2. Progress Granularity:
   - One registry update per source (a source is one unit of work)
   - A source whose fetch failed counts as a failed item; per-article
     errors inside a successful fetch are reported in the message only

3. Cancellation:
   - Checked by ``rss.processor.run`` before each source; articles from
     sources already processed stay committed
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.rss import processor
from herald_service.rss.processor import SourceResult

from .registry import TaskRegistry

logger = logging.getLogger(__name__)

TASK_TYPE = "rss_ingestion"


async def run_rss_ingestion(
    task_id: str,
    task_registry: TaskRegistry,
    session_factory: Callable[[], AsyncSession],
    source_delay: float | None = None,
    item_delay: float | None = None,
) -> None:
    """Fetch every due RSS source and report progress to the registry.

    Args:
        task_id: Registry task to update
        task_registry: Registry holding the task
        session_factory: Callable returning a new AsyncSession
        source_delay: Pause between sources (settings default when None)
        item_delay: Pause between created articles (settings default when None)
    """
    db = session_factory()
    new_articles = 0

    async def on_progress(done: int, total: int, source_name: str, result: SourceResult) -> None:
        nonlocal new_articles
        new_articles += result.new_articles
        if not result.success:
            task_registry.record_error(
                task_id,
                item_id=source_name,
                error="; ".join(result.errors) or "fetch failed",
            )
        await task_registry.update_progress(
            task_id,
            processed=done,
            total=total,
            current_item=source_name,
            message=f"Processed {done} of {total} sources, {new_articles} new articles",
        )

    try:
        await task_registry.update_progress(task_id, message="Starting RSS ingestion")

        summary = await processor.run(
            db,
            source_delay=source_delay,
            item_delay=item_delay,
            on_progress=on_progress,
            is_cancelled=lambda: task_registry.is_cancelled(task_id),
        )

        if summary.cancelled:
            await task_registry.mark_cancelled(task_id)
            return

        await task_registry.mark_complete(
            task_id,
            message=(
                f"Imported {summary.new_articles} articles from "
                f"{summary.sources_processed} sources ({summary.sources_failed} failed)"
            ),
        )

    except Exception as e:
        logger.exception(f"RSS ingestion task {task_id} failed")
        await db.rollback()
        await task_registry.mark_failed(task_id, str(e))

    finally:
        await db.close()
