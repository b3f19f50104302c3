"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

# Zero timestamps (year 1) written by older clients mean "unset".
_ZERO_YEAR = 1


class Bucket(str, Enum):
    """Deadline-based classification of a task."""

    OVERDUE = "overdue"
    TODAY = "today"
    THIS_WEEK = "this-week"
    OTHER = "other"


FILTER_MODES = ("all", "mine", "today", "overdue", "incomplete", "complete", "todo")


def parse_timestamp(value) -> datetime | None:
    """Parse an ISO-8601 timestamp from JSON. Naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if parsed.year == _ZERO_YEAR:
        return None
    return parsed


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class TaskItem:
    """A single task in a channel or private list."""

    id: str
    text: str
    notes: str = ""
    completed: bool = False
    assignee_ids: list[str] = field(default_factory=list)
    group_id: str = ""
    created_at: datetime | None = None
    completed_at: datetime | None = None
    deadline: datetime | None = None

    def is_assigned_to(self, user_id: str) -> bool:
        return user_id in self.assignee_ids

    @classmethod
    def from_dict(cls, data: dict) -> "TaskItem":
        """Create TaskItem from its stored/JSON representation."""
        return cls(
            id=data.get("id") or "",
            text=data.get("text") or "",
            notes=data.get("notes") or "",
            completed=bool(data.get("completed", False)),
            assignee_ids=list(data.get("assignee_ids") or []),
            group_id=data.get("group_id") or "",
            created_at=parse_timestamp(data.get("created_at")),
            completed_at=parse_timestamp(data.get("completed_at")),
            deadline=parse_timestamp(data.get("deadline")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "notes": self.notes,
            "completed": self.completed,
            "assignee_ids": list(self.assignee_ids),
            "group_id": self.group_id,
            "created_at": format_timestamp(self.created_at),
            "completed_at": format_timestamp(self.completed_at),
            "deadline": format_timestamp(self.deadline),
        }


@dataclass
class TaskGroup:
    """A named group of tasks. `order` is a free-form sort token."""

    id: str
    name: str
    order: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "TaskGroup":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            order=data.get("order") or "",
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "order": self.order}


@dataclass
class TaskList:
    """All tasks and groups owned by one scope (a channel or a user)."""

    items: list[TaskItem] = field(default_factory=list)
    groups: list[TaskGroup] = field(default_factory=list)
    has_ever_had_tasks: bool = False

    def group_names(self) -> dict[str, str]:
        """Map of group id to display name."""
        return {g.id: g.name for g in self.groups}

    @classmethod
    def from_dict(cls, data: dict) -> "TaskList":
        return cls(
            items=[TaskItem.from_dict(i) for i in data.get("items") or []],
            groups=[TaskGroup.from_dict(g) for g in data.get("groups") or []],
            has_ever_had_tasks=bool(data.get("has_ever_had_tasks", False)),
        )

    def to_dict(self) -> dict:
        return {
            "items": [i.to_dict() for i in self.items],
            "groups": [g.to_dict() for g in self.groups],
            "has_ever_had_tasks": self.has_ever_had_tasks,
        }


@dataclass
class UserDailyPrefs:
    """Daily reminder preference for one user."""

    enabled: bool = True
    last_message_date: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "UserDailyPrefs":
        return cls(
            enabled=bool(data.get("enabled", True)),
            last_message_date=data.get("last_message_date") or "",
        )

    def to_dict(self) -> dict:
        return {"enabled": self.enabled, "last_message_date": self.last_message_date}


@dataclass(frozen=True)
class DayBounds:
    """Time boundaries used for deadline bucketing."""

    today_start: datetime
    today_end: datetime
    week_end: datetime

    @classmethod
    def for_time(cls, now: datetime) -> "DayBounds":
        """
        Boundaries for the local day containing `now`.

        The day and week ends are elapsed hours after local midnight, so a
        DST day still spans 24h.
        """
        if now.tzinfo is None:
            now = now.astimezone()
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_utc = start.astimezone(timezone.utc)
        return cls(
            today_start=start,
            today_end=(start_utc + timedelta(hours=24)).astimezone(start.tzinfo),
            week_end=(start_utc + timedelta(hours=7 * 24)).astimezone(start.tzinfo),
        )


def bucket_for(task: TaskItem, bounds: DayBounds) -> Bucket:
    """
    Classify a task by its deadline.

    Lower bounds are inclusive, upper bounds exclusive. Pure function - no I/O.
    """
    if task.deadline is None:
        return Bucket.OTHER
    if task.deadline < bounds.today_start:
        return Bucket.OVERDUE
    if task.deadline < bounds.today_end:
        return Bucket.TODAY
    if task.deadline < bounds.week_end:
        return Bucket.THIS_WEEK
    return Bucket.OTHER


def split_by_bucket(tasks: list[TaskItem], bounds: DayBounds) -> dict[Bucket, list[TaskItem]]:
    """Group tasks by bucket, preserving input order within each bucket."""
    buckets: dict[Bucket, list[TaskItem]] = {b: [] for b in Bucket}
    for t in tasks:
        buckets[bucket_for(t, bounds)].append(t)
    return buckets


def most_urgent(tasks: list[TaskItem], bounds: DayBounds) -> list[TaskItem]:
    """
    Reduce tasks to the most urgent non-empty bucket.

    Overdue first, then today, then this week; falls back to every task given.
    """
    buckets = split_by_bucket(tasks, bounds)
    for bucket in (Bucket.OVERDUE, Bucket.TODAY, Bucket.THIS_WEEK):
        if buckets[bucket]:
            return buckets[bucket]
    return list(tasks)


def filter_tasks(
    tasks: list[TaskItem],
    mode: str,
    now: datetime,
    user_id: str = "",
    private: bool = False,
) -> list[TaskItem]:
    """
    Apply a named filter mode to a task collection.

    The `todo` mode keeps incomplete tasks assigned to `user_id` (any incomplete
    task for a private list) and reduces them to the most urgent bucket.
    Pure function - no I/O.
    """
    bounds = DayBounds.for_time(now)

    match mode:
        case "all":
            return list(tasks)
        case "mine":
            return [t for t in tasks if t.is_assigned_to(user_id)]
        case "today":
            return [t for t in tasks if bucket_for(t, bounds) == Bucket.TODAY]
        case "overdue":
            return [t for t in tasks if bucket_for(t, bounds) == Bucket.OVERDUE]
        case "incomplete":
            return [t for t in tasks if not t.completed]
        case "complete":
            return [t for t in tasks if t.completed]
        case "todo":
            pending = [
                t for t in tasks if not t.completed and (private or t.is_assigned_to(user_id))
            ]
            return most_urgent(pending, bounds)

    raise ValueError(f"Unknown filter mode: {mode}")


def deadline_sort_key(task: TaskItem) -> tuple[bool, float, str]:
    """Dated tasks first by deadline ascending, then by text."""
    stamp = task.deadline.timestamp() if task.deadline else 0.0
    return (task.deadline is None, stamp, task.text)


def sort_tasks(tasks: list[TaskItem]) -> list[TaskItem]:
    """
    Sort by deadline ascending (undated last), tie-broken by text.

    Pure function - no I/O.
    """
    return sorted(tasks, key=deadline_sort_key)
