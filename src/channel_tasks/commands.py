"""Slash command handlers."""

import logging
from dataclasses import dataclass

from .context import PluginContext
from .core.render import (
    empty_filter_message,
    empty_list_message,
    format_task_listing,
)
from .core.tasks import DayBounds, filter_tasks, sort_tasks
from .notifier import set_reminder_preference
from .ports.kv_store import StoreError
from .store import channel_key, private_key

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_NAME = "This Channel"


@dataclass
class CommandResponse:
    """Reply to a slash command, in Mattermost's response format."""

    text: str = ""
    response_type: str = "ephemeral"

    def to_dict(self) -> dict:
        return {"response_type": self.response_type, "text": self.text}


# trigger -> (scope, argument, autocomplete description)
COMMANDS: dict[str, tuple[str, str, str]] = {
    "tasks-message-on": ("reminder", "on", "Enable daily task reminders"),
    "tasks-message-off": ("reminder", "off", "Disable daily task reminders"),
    "tasks-message-reset": ("reminder", "reset", "Reset daily task reminder"),
    # Channel task commands
    "tasks": ("channel", "all", "Show all tasks in this channel"),
    "tasks-mine": ("channel", "mine", "Show tasks assigned to me in this channel"),
    "tasks-overdue": ("channel", "overdue", "Show tasks due in the past in this channel"),
    "tasks-today": ("channel", "today", "Show tasks due today in this channel"),
    "tasks-incomplete": ("channel", "incomplete", "Show incomplete tasks in this channel"),
    "tasks-complete": ("channel", "complete", "Show completed tasks in this channel"),
    "tasks-todo": (
        "channel",
        "todo",
        "Show which tasks to focus on next in this channel "
        "(incomplete, assigned to me, prioritized by deadline)",
    ),
    # Private task commands
    "tasks-private": ("private", "all", "Show all private tasks"),
    "tasks-private-overdue": ("private", "overdue", "Show private tasks due in the past"),
    "tasks-private-today": ("private", "today", "Show private tasks due today"),
    "tasks-private-incomplete": ("private", "incomplete", "Show incomplete private tasks"),
    "tasks-private-complete": ("private", "complete", "Show completed private tasks"),
    "tasks-private-todo": (
        "private",
        "todo",
        "Show which private tasks to focus on next (incomplete, prioritized by deadline)",
    ),
    # Aliases
    "t": ("channel", "all", "Show all tasks in this channel (alias for /tasks)"),
    "tmine": ("channel", "mine", "Show tasks assigned to me in this channel (alias for /tasks-mine)"),
    "ttodo": ("channel", "todo", "Show which tasks to focus on next in this channel (alias for /tasks-todo)"),
    "tp": ("private", "all", "Show all private tasks (alias for /tasks-private)"),
    "tptodo": ("private", "todo", "Show which private tasks to focus on next (alias for /tasks-private-todo)"),
}

REMINDER_REPLIES = {
    "on": (
        "✅ Daily task reminders are now **enabled**. You'll receive a summary of your "
        "assigned tasks when you first log in each day."
    ),
    "off": "🔕 Daily task reminders are now **disabled**.",
    "reset": (
        "🔄 Daily task reminder has been **reset**. You will receive a new summary "
        "on your next action."
    ),
}


def parse_trigger(command: str) -> str:
    """'/tasks-mine extra words' -> 'tasks-mine'."""
    words = command.split()
    if not words:
        return ""
    return words[0].removeprefix("/")


def execute_command(
    ctx: PluginContext, command: str, user_id: str, channel_id: str = ""
) -> CommandResponse:
    """Route a slash command. Unknown triggers get an empty reply."""
    trigger = parse_trigger(command)
    if trigger not in COMMANDS:
        return CommandResponse()

    scope, argument, _ = COMMANDS[trigger]
    match scope:
        case "reminder":
            return reminder_command(ctx, user_id, argument)
        case "channel":
            return channel_tasks_command(ctx, user_id, channel_id, argument)
        case "private":
            return private_tasks_command(ctx, user_id, argument)
    return CommandResponse()


def reminder_command(ctx: PluginContext, user_id: str, action: str) -> CommandResponse:
    try:
        set_reminder_preference(ctx, user_id, action)
    except StoreError as e:
        logger.error(f"Failed to update reminders for user {user_id}: {e}")
        return CommandResponse("❌ Could not update your reminder settings.")
    return CommandResponse(REMINDER_REPLIES[action])


def _channel_name(ctx: PluginContext, channel_id: str) -> str:
    try:
        return ctx.host.get_channel(channel_id).display_name or DEFAULT_CHANNEL_NAME
    except Exception as e:
        logger.warning(f"Failed to look up channel {channel_id}: {e}")
        return DEFAULT_CHANNEL_NAME


def channel_tasks_command(
    ctx: PluginContext, user_id: str, channel_id: str, mode: str
) -> CommandResponse:
    """Handle /tasks and its filtered variants for the current channel."""
    task_list = ctx.tasks.load(channel_key(channel_id))
    channel_name = _channel_name(ctx, channel_id)

    if not task_list.items:
        return CommandResponse(empty_list_message(channel_name))

    now = ctx.now()
    selected = sort_tasks(filter_tasks(task_list.items, mode, now, user_id=user_id))
    if not selected:
        return CommandResponse(empty_filter_message(mode, channel_name))

    return CommandResponse(
        format_task_listing(
            selected,
            mode,
            DayBounds.for_time(now),
            task_list.group_names(),
            channel_name=channel_name,
        )
    )


def private_tasks_command(ctx: PluginContext, user_id: str, mode: str) -> CommandResponse:
    """Handle /tasks-private and its filtered variants."""
    task_list = ctx.tasks.load(private_key(user_id))

    if not task_list.items:
        return CommandResponse(empty_list_message(private=True))

    now = ctx.now()
    selected = sort_tasks(filter_tasks(task_list.items, mode, now, user_id=user_id, private=True))
    if not selected:
        return CommandResponse(empty_filter_message(mode, private=True))

    return CommandResponse(
        format_task_listing(
            selected,
            mode,
            DayBounds.for_time(now),
            task_list.group_names(),
            private=True,
        )
    )
