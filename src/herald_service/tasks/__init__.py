"""Background tasks module."""

from .registry import TaskProgress, TaskRegistry, task_registry
from .rss_ingestion import run_rss_ingestion

__all__ = [
    "run_rss_ingestion",
    "TaskProgress",
    "TaskRegistry",
    "task_registry",
]
