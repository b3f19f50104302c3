"""Tests for task list and preference persistence."""

import errno
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from channel_tasks.adapters.file_kv import FileKVStore
from channel_tasks.core.tasks import TaskGroup, TaskItem, UserDailyPrefs
from channel_tasks.ports.kv_store import StoreError
from channel_tasks.store import (
    DailyPrefsStore,
    NotFoundError,
    TaskListRepository,
    channel_key,
    prefs_key,
    private_key,
)


@pytest.fixture
def clock():
    times = iter(datetime(2024, 6, 3, 9, m, tzinfo=timezone.utc) for m in range(60))
    return lambda: next(times)


@pytest.fixture
def repo(kv, clock):
    ids = iter(f"id{n}" for n in range(1, 100))
    return TaskListRepository(kv, id_factory=lambda: next(ids), clock=clock)


KEY = channel_key("c1")


class TestKeys:
    def test_key_formats(self):
        assert channel_key("abc") == "tasks_abc"
        assert private_key("u1") == "private_tasks_u1"
        assert prefs_key("u1") == "daily_prefs_u1"


class TestLoad:
    def test_missing_is_empty(self, repo):
        tl = repo.load(KEY)
        assert tl.items == [] and tl.groups == []

    def test_corrupt_is_empty(self, repo, kv):
        kv.data[KEY] = b"{not json"
        assert repo.load(KEY).items == []

    def test_wrong_shape_is_empty(self, repo, kv):
        kv.data[KEY] = b"[1, 2, 3]"
        assert repo.load(KEY).items == []

    def test_bad_item_is_empty(self, repo, kv):
        kv.data[KEY] = json.dumps({"items": ["oops"]}).encode()
        assert repo.load(KEY).items == []

    def test_read_error_is_empty(self, repo, kv):
        kv.data[KEY] = json.dumps({"items": [{"id": "1", "text": "x"}]}).encode()
        kv.fail_reads = True
        assert repo.load(KEY).items == []


class TestItems:
    def test_create_assigns_id_and_timestamp(self, repo):
        item = repo.create_item(KEY, TaskItem(id="client-id", text="Write docs"))
        assert item.id == "id1"
        assert item.created_at == datetime(2024, 6, 3, 9, 0, tzinfo=timezone.utc)

        stored = repo.load(KEY)
        assert [t.text for t in stored.items] == ["Write docs"]
        assert stored.has_ever_had_tasks is True

    def test_create_preserves_insertion_order(self, repo):
        for text in ["c", "a", "b"]:
            repo.create_item(KEY, TaskItem(id="", text=text))
        assert [t.text for t in repo.load(KEY).items] == ["c", "a", "b"]

    def test_has_ever_had_tasks_survives_delete(self, repo):
        item = repo.create_item(KEY, TaskItem(id="", text="x"))
        repo.delete_item(KEY, item.id)
        stored = repo.load(KEY)
        assert stored.items == []
        assert stored.has_ever_had_tasks is True

    def test_update_replaces(self, repo):
        item = repo.create_item(KEY, TaskItem(id="", text="old"))
        repo.update_item(KEY, TaskItem(id=item.id, text="new", notes="n", assignee_ids=["u1"]))
        stored = repo.load(KEY).items[0]
        assert stored.text == "new"
        assert stored.notes == "n"
        assert stored.assignee_ids == ["u1"]
        assert stored.created_at == item.created_at

    def test_update_missing_raises(self, repo):
        with pytest.raises(NotFoundError):
            repo.update_item(KEY, TaskItem(id="nope", text="x"))

    def test_completing_sets_timestamp(self, repo):
        item = repo.create_item(KEY, TaskItem(id="", text="x"))
        done = repo.update_item(KEY, TaskItem(id=item.id, text="x", completed=True))
        assert done.completed_at == datetime(2024, 6, 3, 9, 1, tzinfo=timezone.utc)

    def test_completing_again_keeps_timestamp(self, repo):
        item = repo.create_item(KEY, TaskItem(id="", text="x"))
        first = repo.update_item(KEY, TaskItem(id=item.id, text="x", completed=True)).completed_at
        again = repo.update_item(KEY, TaskItem(id=item.id, text="x y", completed=True))
        assert again.completed_at == first
        assert repo.load(KEY).items[0].completed_at == first

    def test_client_cannot_set_completion_time(self, repo):
        item = repo.create_item(KEY, TaskItem(id="", text="x"))
        forged = datetime(2000, 1, 1, tzinfo=timezone.utc)
        updated = repo.update_item(
            KEY, TaskItem(id=item.id, text="x", completed=True, completed_at=forged)
        )
        assert updated.completed_at != forged

    def test_uncompleting_keeps_stale_timestamp(self, repo):
        item = repo.create_item(KEY, TaskItem(id="", text="x"))
        first = repo.update_item(KEY, TaskItem(id=item.id, text="x", completed=True)).completed_at
        reopened = repo.update_item(KEY, TaskItem(id=item.id, text="x", completed=False))
        assert reopened.completed is False
        assert reopened.completed_at == first

    def test_delete(self, repo):
        a = repo.create_item(KEY, TaskItem(id="", text="a"))
        repo.create_item(KEY, TaskItem(id="", text="b"))
        repo.delete_item(KEY, a.id)
        assert [t.text for t in repo.load(KEY).items] == ["b"]

    def test_delete_missing_raises(self, repo):
        with pytest.raises(NotFoundError):
            repo.delete_item(KEY, "nope")

    def test_write_failure_propagates(self, repo, kv):
        kv.fail_writes = True
        with pytest.raises(StoreError):
            repo.create_item(KEY, TaskItem(id="", text="x"))

    def test_scopes_are_independent(self, repo):
        repo.create_item(channel_key("c1"), TaskItem(id="", text="channel"))
        repo.create_item(private_key("c1"), TaskItem(id="", text="private"))
        assert [t.text for t in repo.load(channel_key("c1")).items] == ["channel"]
        assert [t.text for t in repo.load(private_key("c1")).items] == ["private"]


class TestGroups:
    def test_create_and_update(self, repo):
        group = repo.create_group(KEY, TaskGroup(id="", name="Backend"))
        assert group.id == "id1"
        repo.update_group(KEY, TaskGroup(id=group.id, name="Server", order="b"))
        stored = repo.load(KEY).groups
        assert [(g.name, g.order) for g in stored] == [("Server", "b")]

    def test_update_missing_raises(self, repo):
        with pytest.raises(NotFoundError):
            repo.update_group(KEY, TaskGroup(id="nope", name="x"))

    def test_delete_cascades_to_null(self, repo):
        group = repo.create_group(KEY, TaskGroup(id="", name="Backend"))
        other = repo.create_group(KEY, TaskGroup(id="", name="Frontend"))
        for text in ["a", "b", "c"]:
            repo.create_item(KEY, TaskItem(id="", text=text, group_id=group.id))
        repo.create_item(KEY, TaskItem(id="", text="d", group_id=other.id))

        repo.delete_group(KEY, group.id)

        stored = repo.load(KEY)
        assert [g.id for g in stored.groups] == [other.id]
        assert [t.group_id for t in stored.items] == ["", "", "", other.id]
        assert len(stored.items) == 4

    def test_delete_missing_raises(self, repo):
        with pytest.raises(NotFoundError):
            repo.delete_group(KEY, "nope")


class TestDailyPrefsStore:
    def test_default_enabled(self, kv):
        prefs = DailyPrefsStore(kv).load("u1")
        assert prefs == UserDailyPrefs(enabled=True, last_message_date="")

    def test_round_trip(self, kv):
        store = DailyPrefsStore(kv)
        store.save("u1", UserDailyPrefs(enabled=False, last_message_date="2024-06-03"))
        assert json.loads(kv.data["daily_prefs_u1"]) == {
            "enabled": False,
            "last_message_date": "2024-06-03",
        }
        assert store.load("u1").enabled is False

    def test_corrupt_uses_defaults(self, kv):
        kv.data["daily_prefs_u1"] = b"garbage"
        assert DailyPrefsStore(kv).load("u1").enabled is True

    def test_read_error_uses_defaults(self, kv):
        kv.fail_reads = True
        assert DailyPrefsStore(kv).load("u1").enabled is True


class TestFileBackedRepository:
    def test_failed_write_keeps_existing_tasks(self, tmp_path, clock, monkeypatch):
        repo = TaskListRepository(FileKVStore(tmp_path), clock=clock)
        for n in range(5):
            repo.create_item(KEY, TaskItem(id="", text=f"task {n}"))

        def write_half_then_fail(self, data):
            with open(self, "wb") as fh:
                fh.write(data[: len(data) // 2])
            raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr(Path, "write_bytes", write_half_then_fail)
        with pytest.raises(StoreError):
            repo.create_item(KEY, TaskItem(id="", text="one too many"))

        assert [t.text for t in repo.load(KEY).items] == [f"task {n}" for n in range(5)]
