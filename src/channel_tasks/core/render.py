"""Pure rendering of task listings for chat replies - no I/O dependencies."""

from datetime import datetime, timedelta, tzinfo

from .tasks import Bucket, DayBounds, TaskItem, bucket_for

FILTER_LABELS = {
    "all": "All",
    "mine": "Assigned to Me",
    "today": "Due Today",
    "overdue": "Overdue",
    "incomplete": "Incomplete",
    "complete": "Complete",
    "todo": "To Do",
}

STATUS_ICONS = {
    Bucket.OVERDUE: "🟥",
    Bucket.TODAY: "🟧",
    Bucket.THIS_WEEK: "🟨",
    Bucket.OTHER: "⬜",
}
COMPLETED_ICON = "🟩"


def filter_label(mode: str) -> str:
    return FILTER_LABELS.get(mode, mode)


def short_date(value: datetime, tz: tzinfo | None = None) -> str:
    """Format like 'Mon Jan 2' in the given timezone."""
    local = value.astimezone(tz) if tz else value
    return f"{local:%a %b} {local.day}"


def status_icon(task: TaskItem, bounds: DayBounds) -> str:
    if task.completed:
        return COMPLETED_ICON
    return STATUS_ICONS[bucket_for(task, bounds)]


def format_deadline(deadline: datetime | None, bounds: DayBounds) -> str:
    """
    Human-readable relative deadline.

    Returns '' for no deadline, 'Today'/'Tomorrow' when close, otherwise a
    short date. Overdue deadlines always show the date.
    """
    if deadline is None:
        return ""
    tz = bounds.today_start.tzinfo
    if deadline < bounds.today_start:
        return short_date(deadline, tz)
    if deadline < bounds.today_end:
        return "Today"
    if deadline < bounds.today_start + timedelta(hours=48):
        return "Tomorrow"
    return short_date(deadline, tz)


def format_task_line(task: TaskItem, bounds: DayBounds, group_names: dict[str, str]) -> str:
    """
    Format a single task for a listing.

    Pure function - no I/O.
    """
    parts = [f"- {status_icon(task, bounds)} {task.text}"]
    group = group_names.get(task.group_id) if task.group_id else None
    if group:
        parts.append(f"**{group}**")
    when = format_deadline(task.deadline, bounds)
    if when:
        parts.append(f"_due {when}_")
    return " | ".join(parts)


def format_task_listing(
    tasks: list[TaskItem],
    mode: str,
    bounds: DayBounds,
    group_names: dict[str, str],
    channel_name: str = "",
    private: bool = False,
) -> str:
    """Render an already filtered and sorted listing with its header."""
    if private:
        header = f"### 🔒 Private Tasks ({filter_label(mode)})"
    else:
        header = f"### {channel_name} Tasks ({filter_label(mode)})"
    lines = [format_task_line(t, bounds, group_names) for t in tasks]
    return header + "\n\n" + "\n".join(lines) + "\n"


def empty_list_message(channel_name: str = "", private: bool = False) -> str:
    if private:
        return "🔒 No private tasks yet. Use the task sidebar to add some!"
    return f"📋 No tasks in **{channel_name}**."


def empty_filter_message(mode: str, channel_name: str = "", private: bool = False) -> str:
    """Message shown when a filter matches nothing."""
    if private:
        prefix, location = "🔒", "in your private tasks"
    else:
        prefix, location = "📋", f"in **{channel_name}**"

    match mode:
        case "mine":
            return f"{prefix} No tasks assigned to you {location}."
        case "today":
            return f"{prefix} No tasks due today {location}. 🎉"
        case "incomplete":
            return f"{prefix} All tasks are complete {location}! 🎉"
        case "complete":
            return f"{prefix} No completed tasks {location} yet."
        case "todo":
            if private:
                return f"{prefix} Nothing on your private to-do list! 🎉"
            return f"{prefix} Nothing on your to-do list {location}! 🎉"
    return f"{prefix} No tasks match this filter {location}."
