"""Admin API schemas for background tasks."""

from pydantic import BaseModel, Field


class StartIngestionResponse(BaseModel):
    """Response when an RSS ingestion task is started.

    Example:
        >>> StartIngestionResponse(
        ...     task_id="550e8400-e29b-41d4-a716-446655440000",
        ...     sources_due=4,
        ...     progress_url="/api/v1/admin/tasks/550e8400-.../progress"
        ... )
    """

    task_id: str = Field(description="Unique task identifier")
    sources_due: int = Field(description="Number of sources due for fetching", ge=0)
    progress_url: str = Field(description="SSE progress stream endpoint URL")


class TaskStatusResponse(BaseModel):
    """Current status of a background task.

    This is a snapshot of task state for polling clients.
    For real-time updates, use the SSE endpoint instead.

    Attributes:
        task_id: Unique task identifier
        task_type: Type of task (rss_ingestion, ...)
        status: Current task status
        total_items: Total number of items to process
        processed_items: Number of items processed so far
        failed_items: Number of items that failed
        progress_percent: Progress percentage (0-100)
        message: Human-readable status message
        errors: List of errors encountered
    """

    task_id: str = Field(description="Unique task identifier")
    task_type: str = Field(description="Type of task (rss_ingestion, ...)")
    status: str = Field(
        description="Current task status (pending, running, completed, failed, cancelled)"
    )
    total_items: int = Field(description="Total number of items to process", ge=0)
    processed_items: int = Field(description="Number of items processed so far", ge=0)
    failed_items: int = Field(description="Number of items that failed", ge=0)
    progress_percent: int = Field(description="Progress percentage (0-100)", ge=0, le=100)
    message: str | None = Field(default=None, description="Human-readable status message")
    errors: list[dict[str, str]] = Field(
        default_factory=list, description="List of errors encountered"
    )


class CancelTaskResponse(BaseModel):
    task_id: str
    cancelled: bool = Field(description="False when the task had already finished")
