"""Tests for slash command handling."""

from datetime import timedelta

import pytest

from channel_tasks.commands import COMMANDS, execute_command, parse_trigger
from channel_tasks.core.tasks import TaskGroup, TaskItem
from channel_tasks.store import channel_key, private_key


@pytest.fixture
def channel(ctx, host, now):
    host.add_channel("c1", "Dev", ["alice"])
    group = ctx.tasks.create_group(channel_key("c1"), TaskGroup(id="", name="Backend"))
    ctx.tasks.create_item(
        channel_key("c1"),
        TaskItem(
            id="",
            text="Fix build",
            assignee_ids=["alice"],
            group_id=group.id,
            deadline=now - timedelta(days=1),
        ),
    )
    ctx.tasks.create_item(
        channel_key("c1"),
        TaskItem(id="", text="Write docs", assignee_ids=["alice"], deadline=now + timedelta(days=2)),
    )
    ctx.tasks.create_item(channel_key("c1"), TaskItem(id="", text="Plan party", assignee_ids=["bob"]))
    return "c1"


class TestParseTrigger:
    def test_strips_slash_and_args(self):
        assert parse_trigger("/tasks-mine  extra") == "tasks-mine"

    def test_empty(self):
        assert parse_trigger("   ") == ""


class TestCommandTable:
    def test_aliases_match_targets(self):
        assert COMMANDS["t"][:2] == COMMANDS["tasks"][:2]
        assert COMMANDS["tmine"][:2] == COMMANDS["tasks-mine"][:2]
        assert COMMANDS["ttodo"][:2] == COMMANDS["tasks-todo"][:2]
        assert COMMANDS["tp"][:2] == COMMANDS["tasks-private"][:2]
        assert COMMANDS["tptodo"][:2] == COMMANDS["tasks-private-todo"][:2]

    def test_every_command_has_description(self):
        assert all(desc for _, _, desc in COMMANDS.values())


class TestChannelCommands:
    def test_all(self, ctx, channel):
        response = execute_command(ctx, "/tasks", "alice", channel)
        assert response.response_type == "ephemeral"
        lines = response.text.splitlines()
        assert lines[0] == "### Dev Tasks (All)"
        assert lines[2] == "- 🟥 Fix build | **Backend** | _due Sun Jun 2_"
        assert lines[3] == "- 🟨 Write docs | _due Wed Jun 5_"
        assert lines[4] == "- ⬜ Plan party"

    def test_alias(self, ctx, channel):
        assert execute_command(ctx, "/t", "alice", channel).text == execute_command(
            ctx, "/tasks", "alice", channel
        ).text

    def test_mine(self, ctx, channel):
        text = execute_command(ctx, "/tmine", "bob", channel).text
        assert "Plan party" in text
        assert "Fix build" not in text

    def test_todo_shows_most_urgent(self, ctx, channel):
        text = execute_command(ctx, "/tasks-todo", "alice", channel).text
        assert "(To Do)" in text
        assert "Fix build" in text
        assert "Write docs" not in text

    def test_empty_filter(self, ctx, channel):
        text = execute_command(ctx, "/tasks-complete", "alice", channel).text
        assert text == "📋 No completed tasks in **Dev** yet."

    def test_empty_channel(self, ctx, host):
        host.add_channel("empty", "Quiet", [])
        assert execute_command(ctx, "/tasks", "alice", "empty").text == "📋 No tasks in **Quiet**."

    def test_unknown_channel_name_falls_back(self, ctx):
        assert "**This Channel**" in execute_command(ctx, "/tasks", "alice", "ghost").text


class TestPrivateCommands:
    def test_no_private_tasks(self, ctx):
        text = execute_command(ctx, "/tp", "alice").text
        assert text.startswith("🔒 No private tasks yet")

    def test_private_todo(self, ctx, now):
        key = private_key("alice")
        ctx.tasks.create_item(key, TaskItem(id="", text="Dentist", deadline=now + timedelta(hours=2)))
        ctx.tasks.create_item(key, TaskItem(id="", text="Taxes", deadline=now + timedelta(days=5)))
        text = execute_command(ctx, "/tptodo", "alice").text
        assert text.startswith("### 🔒 Private Tasks (To Do)")
        assert "🟧 Dentist | _due Today_" in text
        assert "Taxes" not in text

    def test_private_lists_are_per_user(self, ctx):
        ctx.tasks.create_item(private_key("alice"), TaskItem(id="", text="Secret"))
        assert "Secret" not in execute_command(ctx, "/tasks-private", "bob").text


class TestReminderCommands:
    def test_off_then_on(self, ctx):
        assert "disabled" in execute_command(ctx, "/tasks-message-off", "alice").text
        assert ctx.prefs.load("alice").enabled is False
        assert "enabled" in execute_command(ctx, "/tasks-message-on", "alice").text
        assert ctx.prefs.load("alice").enabled is True

    def test_reset(self, ctx):
        text = execute_command(ctx, "/tasks-message-reset", "alice").text
        assert "reset" in text
        assert ctx.prefs.load("alice").last_message_date == ""

    def test_store_failure_is_reported(self, ctx, kv):
        kv.fail_writes = True
        assert execute_command(ctx, "/tasks-message-on", "alice").text.startswith("❌")


def test_unknown_command_is_empty(ctx):
    response = execute_command(ctx, "/weather", "alice", "c1")
    assert response.text == ""
