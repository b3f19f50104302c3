"""Task list and daily preference persistence on top of a KVStore."""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from .core.tasks import TaskGroup, TaskItem, TaskList, UserDailyPrefs
from .ports.kv_store import KVStore, StoreError

logger = logging.getLogger(__name__)


class NotFoundError(Exception):
    """Raised when an update or delete targets an id that does not exist."""

    pass


def channel_key(channel_id: str) -> str:
    return f"tasks_{channel_id}"


def private_key(user_id: str) -> str:
    return f"private_tasks_{user_id}"


def prefs_key(user_id: str) -> str:
    return f"daily_prefs_{user_id}"


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _decode(raw: bytes) -> dict:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


class TaskListRepository:
    """
    Read-modify-write access to one TaskList per scope key.

    Reads never fail: a missing, unreadable or corrupt record loads as an
    empty list. Writes propagate StoreError. There is no version check, so
    concurrent writers to the same scope are last-write-wins.
    """

    def __init__(
        self,
        kv: KVStore,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.kv = kv
        self.id_factory = id_factory
        self.clock = clock

    def load(self, key: str) -> TaskList:
        try:
            raw = self.kv.get(key)
        except StoreError as e:
            logger.warning(f"Failed to read {key}, using empty list: {e}")
            return TaskList()
        if raw is None:
            return TaskList()
        try:
            return TaskList.from_dict(_decode(raw))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Corrupt task list at {key}, using empty list: {e}")
            return TaskList()

    def save(self, key: str, task_list: TaskList) -> None:
        self.kv.set(key, json.dumps(task_list.to_dict()).encode())

    # ---- items ----

    def create_item(self, key: str, item: TaskItem) -> TaskItem:
        """Append a task with a fresh id and creation time."""
        item.id = self.id_factory()
        item.created_at = self.clock()
        task_list = self.load(key)
        task_list.items.append(item)
        task_list.has_ever_had_tasks = True
        self.save(key, task_list)
        return item

    def update_item(self, key: str, item: TaskItem) -> TaskItem:
        """
        Replace the task with the same id.

        The completion time is stamped when the task goes from incomplete to
        complete and otherwise keeps its stored value. Creation time is kept.
        """
        task_list = self.load(key)
        for i, existing in enumerate(task_list.items):
            if existing.id != item.id:
                continue
            if item.completed and not existing.completed:
                item.completed_at = self.clock()
            else:
                item.completed_at = existing.completed_at
            item.created_at = existing.created_at
            task_list.items[i] = item
            self.save(key, task_list)
            return item
        raise NotFoundError("Task not found")

    def delete_item(self, key: str, item_id: str) -> None:
        task_list = self.load(key)
        remaining = [t for t in task_list.items if t.id != item_id]
        if len(remaining) == len(task_list.items):
            raise NotFoundError("Task not found")
        task_list.items = remaining
        self.save(key, task_list)

    # ---- groups ----

    def create_group(self, key: str, group: TaskGroup) -> TaskGroup:
        group.id = self.id_factory()
        task_list = self.load(key)
        task_list.groups.append(group)
        self.save(key, task_list)
        return group

    def update_group(self, key: str, group: TaskGroup) -> TaskGroup:
        task_list = self.load(key)
        for i, existing in enumerate(task_list.groups):
            if existing.id == group.id:
                task_list.groups[i] = group
                self.save(key, task_list)
                return group
        raise NotFoundError("Group not found")

    def delete_group(self, key: str, group_id: str) -> None:
        """Remove a group and clear it from every task that referenced it."""
        task_list = self.load(key)
        remaining = [g for g in task_list.groups if g.id != group_id]
        if len(remaining) == len(task_list.groups):
            raise NotFoundError("Group not found")
        task_list.groups = remaining
        for item in task_list.items:
            if item.group_id == group_id:
                item.group_id = ""
        self.save(key, task_list)


class DailyPrefsStore:
    """Per-user daily reminder preferences. Defaults to enabled."""

    def __init__(self, kv: KVStore):
        self.kv = kv

    def load(self, user_id: str) -> UserDailyPrefs:
        key = prefs_key(user_id)
        try:
            raw = self.kv.get(key)
        except StoreError as e:
            logger.warning(f"Failed to read {key}, using defaults: {e}")
            return UserDailyPrefs()
        if raw is None:
            return UserDailyPrefs()
        try:
            return UserDailyPrefs.from_dict(_decode(raw))
        except (ValueError, TypeError) as e:
            logger.warning(f"Corrupt preferences at {key}, using defaults: {e}")
            return UserDailyPrefs()

    def save(self, user_id: str, prefs: UserDailyPrefs) -> None:
        self.kv.set(prefs_key(user_id), json.dumps(prefs.to_dict()).encode())
