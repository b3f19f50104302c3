"""Daily task reminder: activity hooks, digest gathering and delivery."""

import logging

from .context import PluginContext
from .core import daily
from .core.digest import TaskWithContext, assemble_digest, format_digest, with_context
from .ports.kv_store import StoreError
from .store import channel_key, private_key

logger = logging.getLogger(__name__)

REMINDER_ACTIONS = {
    "on": daily.enable,
    "off": daily.disable,
    "reset": daily.reset,
}


def set_reminder_preference(ctx: PluginContext, user_id: str, action: str) -> None:
    """Apply 'on', 'off' or 'reset' to a user's daily reminder preference."""
    change = REMINDER_ACTIONS[action]
    prefs = ctx.prefs.load(user_id)
    ctx.prefs.save(user_id, change(prefs))
    logger.info(f"Daily reminders {action} for user {user_id}")


def check_and_send_daily_message(ctx: PluginContext, user_id: str) -> bool:
    """
    Trigger the daily digest on a user's first activity of the day.

    The reminder date is saved before the digest is handed to the background
    dispatcher, so a failed send still counts as today's reminder.
    Returns True if a digest was dispatched.
    """
    prefs = ctx.prefs.load(user_id)
    today = daily.today_string(ctx.now())
    if not daily.should_notify(prefs, today):
        return False

    try:
        ctx.prefs.save(user_id, daily.mark_notified(prefs, today))
    except StoreError as e:
        logger.error(f"Failed to save reminder date for user {user_id}: {e}")
        return False

    ctx.dispatcher.submit(send_daily_summary, ctx, user_id)
    return True


def on_user_login(ctx: PluginContext, user_id: str) -> bool:
    return check_and_send_daily_message(ctx, user_id)


def on_message_posted(ctx: PluginContext, user_id: str) -> bool:
    """Posts by the bot itself never count as activity."""
    if not user_id or user_id == ctx.bot_user_id:
        return False
    return check_and_send_daily_message(ctx, user_id)


def gather_digest_tasks(ctx: PluginContext, user_id: str) -> list[TaskWithContext]:
    """Channel tasks assigned to the user plus all of the user's private tasks."""
    result: list[TaskWithContext] = []

    try:
        channels = ctx.host.get_channels_for_user(user_id)
    except Exception as e:
        logger.error(f"Failed to list channels for user {user_id}: {e}")
        channels = []

    for channel in channels:
        task_list = ctx.tasks.load(channel_key(channel.id))
        mine = [t for t in task_list.items if t.is_assigned_to(user_id)]
        result.extend(
            with_context(
                mine,
                task_list.group_names(),
                channel_id=channel.id,
                channel_name=channel.display_name,
            )
        )

    private = ctx.tasks.load(private_key(user_id))
    result.extend(with_context(private.items, private.group_names(), is_private=True))
    return result


def compose_digest(ctx: PluginContext, user_id: str) -> str | None:
    """Build the digest message, or None when there is nothing to report."""
    tasks = gather_digest_tasks(ctx, user_id)
    if not tasks:
        return None
    data = assemble_digest(tasks, ctx.now())
    if data.is_empty():
        return None
    return format_digest(data, ctx.tz)


def send_daily_summary(ctx: PluginContext, user_id: str) -> None:
    """Compose and post the digest in the bot's direct channel. Failures are logged only."""
    try:
        message = compose_digest(ctx, user_id)
        if message is None:
            logger.info(f"No tasks to report for user {user_id}")
            return
        channel_id = ctx.host.get_direct_channel(user_id, ctx.bot_user_id)
        ctx.host.create_post(channel_id, message)
        logger.info(f"Sent daily summary to user {user_id}")
    except Exception as e:
        logger.error(f"Failed to send daily summary to user {user_id}: {e}")
