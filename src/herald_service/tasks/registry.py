"""In-memory progress tracking for admin background tasks.

Design Decisions:

1. In-Memory Storage:
   - Task state lives in process memory, not the database
   - Rationale: Admin jobs (RSS ingestion) are rare and finish in minutes
   - Trade-off: State is lost on restart; finished tasks are pruned once
     more than ``MAX_FINISHED_TASKS`` accumulate

2. Shared Instance:
   - One registry per process (``task_registry``); ``TaskRegistry()``
     always returns it
   - Safe without locks: all mutation happens on the event loop

3. Listener Queues:
   - Every SSE connection gets its own ``asyncio.Queue``
   - Updates are pushed with ``put_nowait`` so a slow client never blocks
     the worker

4. Cooperative Cancellation:
   - ``cancel_task`` only sets a flag; the worker polls ``is_cancelled``
     between units of work and finishes with ``mark_cancelled``
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

TaskStatus = Literal["pending", "running", "completed", "failed", "cancelled"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "failed", "cancelled"})

MAX_FINISHED_TASKS = 50


class TaskProgress(BaseModel):
    """Snapshot of a background task, also used as the SSE event payload."""

    task_id: str = Field(description="Unique task identifier (UUID)")
    task_type: str = Field(description="Type of task", examples=["rss_ingestion"])
    status: TaskStatus = Field(description="Current task status")
    total_items: int = Field(description="Total number of items to process", ge=0)
    processed_items: int = Field(default=0, description="Items processed so far", ge=0)
    failed_items: int = Field(default=0, description="Items that failed", ge=0)
    current_item: str | None = Field(default=None, description="Item being processed")
    message: str | None = Field(default=None, description="Human-readable status message")
    started_at: datetime = Field(description="Task creation time (UTC)")
    completed_at: datetime | None = Field(default=None, description="Task end time (UTC)")
    errors: list[dict[str, str]] = Field(
        default_factory=list, description="Per-item errors ({item_id, error})"
    )

    @property
    def is_finished(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def progress_percent(self) -> int:
        """Progress as an integer percentage (0-100)."""
        if self.total_items == 0:
            return 100 if self.status == "completed" else 0
        return min(100, int((self.processed_items / self.total_items) * 100))


class TaskRegistry:
    """Registry of background tasks with per-listener update queues.

    Usage:
        task_id = task_registry.create_task("rss_ingestion", total_items=4)
        await task_registry.update_progress(task_id, processed=1, current_item="BBC News")
        async for progress in task_registry.stream_progress(task_id):
            ...
    """

    _instance: "TaskRegistry | None" = None
    _tasks: dict[str, TaskProgress]
    _queues: dict[str, list[asyncio.Queue[TaskProgress]]]
    _cancelled: set[str]

    def __new__(cls) -> "TaskRegistry":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._tasks = {}
            instance._queues = {}
            instance._cancelled = set()
            cls._instance = instance
        return cls._instance

    def reset(self) -> None:
        """Forget every task (used by tests)."""
        self._tasks.clear()
        self._queues.clear()
        self._cancelled.clear()

    def _require(self, task_id: str) -> TaskProgress:
        task = self._tasks.get(task_id)
        if task is None:
            raise KeyError(f"Task {task_id} not found")
        return task

    def create_task(self, task_type: str, total_items: int) -> str:
        """Register a pending task and return its id."""
        self._prune_finished()
        task_id = str(uuid4())
        self._tasks[task_id] = TaskProgress(
            task_id=task_id,
            task_type=task_type,
            status="pending",
            total_items=total_items,
            started_at=datetime.now(UTC),
        )
        self._queues[task_id] = []

        logger.info(f"Created task {task_id} (type={task_type}, total_items={total_items})")
        return task_id

    async def update_progress(
        self,
        task_id: str,
        processed: int | None = None,
        current_item: str | None = None,
        message: str | None = None,
        total: int | None = None,
    ) -> None:
        """Update counters and notify listeners.

        The first update moves a pending task to ``running``.

        Raises:
            KeyError: If task_id is unknown
        """
        task = self._require(task_id)
        if task.status == "pending":
            task.status = "running"

        if total is not None:
            task.total_items = total
        if processed is not None:
            task.processed_items = processed
        if current_item is not None:
            task.current_item = current_item
        if message is not None:
            task.message = message

        await self._broadcast(task_id, task)

    def record_error(self, task_id: str, item_id: str, error: str) -> None:
        """Count a failed item and keep its error message.

        Raises:
            KeyError: If task_id is unknown
        """
        task = self._require(task_id)
        task.failed_items += 1
        task.errors.append({"item_id": item_id, "error": error})

        logger.warning(f"Task {task_id} error on {item_id}: {error}")

    async def mark_complete(self, task_id: str, message: str | None = None) -> None:
        task = self._require(task_id)
        task.status = "completed"
        task.completed_at = datetime.now(UTC)
        task.current_item = None
        if message is not None:
            task.message = message

        await self._broadcast(task_id, task)
        logger.info(
            f"Task {task_id} completed: "
            f"{task.processed_items} processed, {task.failed_items} failed"
        )

    async def mark_failed(self, task_id: str, error: str) -> None:
        task = self._require(task_id)
        task.status = "failed"
        task.message = error
        task.completed_at = datetime.now(UTC)

        await self._broadcast(task_id, task)
        logger.error(f"Task {task_id} failed: {error}")

    async def mark_cancelled(self, task_id: str) -> None:
        """Record that the worker stopped after a cancellation request."""
        task = self._require(task_id)
        task.status = "cancelled"
        task.message = f"Cancelled after {task.processed_items} of {task.total_items} items"
        task.completed_at = datetime.now(UTC)
        task.current_item = None

        await self._broadcast(task_id, task)
        logger.info(f"Task {task_id} cancelled")

    def cancel_task(self, task_id: str) -> bool:
        """Ask a running task to stop.

        Returns:
            False if the task is unknown or already finished
        """
        task = self._tasks.get(task_id)
        if task is None or task.is_finished:
            return False

        self._cancelled.add(task_id)
        logger.info(f"Cancellation requested for task {task_id}")
        return True

    def is_cancelled(self, task_id: str) -> bool:
        return task_id in self._cancelled

    def get_task(self, task_id: str) -> TaskProgress | None:
        return self._tasks.get(task_id)

    def active_tasks(self, task_type: str) -> list[TaskProgress]:
        """Pending or running tasks of one type."""
        return [
            t for t in self._tasks.values() if t.task_type == task_type and not t.is_finished
        ]

    def list_tasks(self) -> list[TaskProgress]:
        """All known tasks, newest first."""
        return sorted(self._tasks.values(), key=lambda t: t.started_at, reverse=True)

    async def stream_progress(self, task_id: str) -> AsyncGenerator[TaskProgress, None]:
        """Yield the current state, then every update until the task finishes.

        Raises:
            KeyError: If task_id is unknown
        """
        task = self._require(task_id)

        queue: asyncio.Queue[TaskProgress] = asyncio.Queue()
        self._queues.setdefault(task_id, []).append(queue)

        try:
            yield task.model_copy()
            if task.is_finished:
                return

            while True:
                progress = await queue.get()
                yield progress
                if progress.is_finished:
                    break
        finally:
            listeners = self._queues.get(task_id, [])
            if queue in listeners:
                listeners.remove(queue)

    async def _broadcast(self, task_id: str, task: TaskProgress) -> None:
        for queue in self._queues.get(task_id, []):
            try:
                queue.put_nowait(task.model_copy(deep=True))
            except asyncio.QueueFull:
                logger.warning(f"Listener queue full for task {task_id}, dropping update")

    def _prune_finished(self) -> None:
        finished = [t for t in self._tasks.values() if t.is_finished]
        if len(finished) <= MAX_FINISHED_TASKS:
            return

        finished.sort(key=lambda t: t.completed_at or t.started_at)
        for task in finished[: len(finished) - MAX_FINISHED_TASKS]:
            self._tasks.pop(task.task_id, None)
            self._queues.pop(task.task_id, None)
            self._cancelled.discard(task.task_id)


task_registry = TaskRegistry()
