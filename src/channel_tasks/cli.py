"""Channel Tasks CLI."""

import json
import logging
import sys

import click

from .commands import channel_tasks_command, private_tasks_command
from .config import load_config
from .context import build_context
from .core.tasks import FILTER_MODES, filter_tasks, sort_tasks
from .notifier import compose_digest, set_reminder_preference
from .ports.kv_store import StoreError
from .store import channel_key, private_key


@click.group()
@click.version_option(package_name="channel-tasks")
def main():
    """Channel Tasks - per-channel and private task lists for Mattermost."""
    pass


@main.command()
@click.option("--host", default=None, help="Bind address (overrides config)")
@click.option("--port", default=None, type=int, help="Port (overrides config)")
def serve(host: str | None, port: int | None):
    """Run the HTTP server."""
    import uvicorn

    from .api import create_app

    config = load_config()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, config.log_level, logging.INFO),
    )
    logger = logging.getLogger(__name__)

    ctx = build_context(config)
    if not ctx.bot_user_id:
        logger.warning("No bot user id - daily summaries cannot be delivered")

    ctx.dispatcher.start()
    try:
        logger.info("Starting Channel Tasks server...")
        uvicorn.run(create_app(ctx), host=host or config.host, port=port or config.port)
    finally:
        ctx.dispatcher.shutdown()


@main.command("list")
@click.argument("scope_id")
@click.option("--private", is_flag=True, help="SCOPE_ID is a user id (private tasks)")
@click.option(
    "--filter", "mode", type=click.Choice(FILTER_MODES), default="all", show_default=True
)
@click.option("--user", "user_id", default="", help="Requesting user for 'mine' and 'todo'")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_tasks(scope_id: str, private: bool, mode: str, user_id: str, as_json: bool):
    """List tasks for a channel (or a user's private tasks)."""
    ctx = build_context()

    if not as_json:
        if private:
            response = private_tasks_command(ctx, scope_id, mode)
        else:
            response = channel_tasks_command(ctx, user_id, scope_id, mode)
        click.echo(response.text)
        return

    key = private_key(scope_id) if private else channel_key(scope_id)
    task_list = ctx.tasks.load(key)
    selected = sort_tasks(
        filter_tasks(
            task_list.items,
            mode,
            ctx.now(),
            user_id=scope_id if private else user_id,
            private=private,
        )
    )
    click.echo(json.dumps([t.to_dict() for t in selected], indent=2))


@main.command()
@click.argument("user_id")
def digest(user_id: str):
    """Preview a user's daily summary without sending it."""
    ctx = build_context()
    message = compose_digest(ctx, user_id)
    click.echo(message or "Nothing to report.")


@main.command()
@click.argument("action", type=click.Choice(["on", "off", "reset"]))
@click.argument("user_id")
def reminders(action: str, user_id: str):
    """Turn a user's daily reminders on or off, or reset today's reminder."""
    ctx = build_context()
    try:
        set_reminder_preference(ctx, user_id, action)
    except StoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    prefs = ctx.prefs.load(user_id)
    state = "enabled" if prefs.enabled else "disabled"
    click.echo(f"Reminders {state} for {user_id} (last sent: {prefs.last_message_date or 'never'})")
