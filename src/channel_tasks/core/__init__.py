"""Functional core - pure business logic with no I/O."""

from .tasks import (
    Bucket,
    DayBounds,
    TaskGroup,
    TaskItem,
    TaskList,
    UserDailyPrefs,
    bucket_for,
    filter_tasks,
    sort_tasks,
)
from .digest import DigestData, TaskWithContext, assemble_digest, format_digest
from .render import format_task_listing
from .daily import ReminderState, should_notify

__all__ = [
    # Tasks
    "Bucket",
    "DayBounds",
    "TaskGroup",
    "TaskItem",
    "TaskList",
    "UserDailyPrefs",
    "bucket_for",
    "filter_tasks",
    "sort_tasks",
    # Digest
    "DigestData",
    "TaskWithContext",
    "assemble_digest",
    "format_digest",
    # Rendering
    "format_task_listing",
    # Daily reminders
    "ReminderState",
    "should_notify",
]
