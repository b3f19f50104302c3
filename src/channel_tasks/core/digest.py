"""Pure daily digest assembly logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .render import short_date
from .tasks import Bucket, DayBounds, TaskItem, bucket_for, deadline_sort_key

PRIVATE_SOURCE = "Private Tasks"
UNGROUPED = "Ungrouped"

DIGEST_FOOTER = "_Use `/tasks-message-off` to disable these reminders._"


@dataclass
class TaskWithContext:
    """A task together with where it lives."""

    task: TaskItem
    group_name: str = UNGROUPED
    channel_id: str = ""
    channel_name: str = PRIVATE_SOURCE
    is_private: bool = False


@dataclass
class DigestData:
    """Assembled digest sections ready for formatting."""

    date: date
    completed_yesterday: list[TaskWithContext] = field(default_factory=list)
    overdue: list[TaskWithContext] = field(default_factory=list)
    today: list[TaskWithContext] = field(default_factory=list)
    this_week: list[TaskWithContext] = field(default_factory=list)
    other: list[TaskWithContext] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.completed_yesterday or self.overdue or self.today or self.this_week or self.other
        )


def with_context(
    items: list[TaskItem],
    group_names: dict[str, str],
    channel_id: str = "",
    channel_name: str = PRIVATE_SOURCE,
    is_private: bool = False,
) -> list[TaskWithContext]:
    """Attach group and source details to each task."""
    return [
        TaskWithContext(
            task=t,
            group_name=group_names.get(t.group_id, UNGROUPED) if t.group_id else UNGROUPED,
            channel_id=channel_id,
            channel_name=channel_name,
            is_private=is_private,
        )
        for t in items
    ]


def digest_sort_key(entry: TaskWithContext) -> tuple:
    """Channel tasks before private ones, by channel name, then deadline and text."""
    return (entry.is_private, entry.channel_name, *deadline_sort_key(entry.task))


def _completed_on(entry: TaskWithContext, day: date, bounds: DayBounds) -> bool:
    completed_at = entry.task.completed_at
    if completed_at is None:
        return False
    return completed_at.astimezone(bounds.today_start.tzinfo).date() == day


def assemble_digest(tasks: list[TaskWithContext], now: datetime) -> DigestData:
    """
    Bucket tasks for the daily digest.

    Completed tasks only appear when finished yesterday. Private tasks
    without a deadline are left out. Pure function - no I/O.
    """
    bounds = DayBounds.for_time(now)
    today = bounds.today_start.date()
    yesterday = today - timedelta(days=1)
    data = DigestData(date=today)

    sections = {
        Bucket.OVERDUE: data.overdue,
        Bucket.TODAY: data.today,
        Bucket.THIS_WEEK: data.this_week,
        Bucket.OTHER: data.other,
    }

    for entry in tasks:
        if entry.task.completed:
            if _completed_on(entry, yesterday, bounds):
                data.completed_yesterday.append(entry)
            continue
        if entry.is_private and entry.task.deadline is None:
            continue
        sections[bucket_for(entry.task, bounds)].append(entry)

    for section in (data.completed_yesterday, *sections.values()):
        section.sort(key=digest_sort_key)

    return data


def format_digest_section(entries: list[TaskWithContext], tz=None) -> str:
    """
    Format one section, printing a bold source header whenever it changes.

    Pure function - no I/O.
    """
    lines = []
    last_source = None
    for entry in entries:
        if entry.channel_name != last_source:
            lines.append(f"**{entry.channel_name}**")
            last_source = entry.channel_name
        due = ""
        if entry.task.deadline:
            due = f" | _due {short_date(entry.task.deadline, tz)}_"
        lines.append(f"- {entry.task.text}{due}")
    return "\n".join(lines) + "\n"


def format_digest(data: DigestData, tz=None) -> str:
    """Render the digest as a Markdown message."""
    parts = ["### Your Daily Task Summary\n\n\n---\n"]

    sections = [
        ("🟩 **Completed Yesterday**", data.completed_yesterday),
        ("🟥 **Past Due**", data.overdue),
        ("🟧 **Due Today**", data.today),
        ("🟨 **Due Within 1 Week**", data.this_week),
        ("⬜ **Everything Else**", data.other),
    ]
    for title, entries in sections:
        if entries:
            parts.append(f"{title}\n\n{format_digest_section(entries, tz)}\n---\n")

    parts.append(f"{DIGEST_FOOTER}\n\n---\n")
    return "".join(parts)
