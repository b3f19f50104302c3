"""Shared fixtures: a fixed clock and a context wired with fakes."""

from datetime import datetime, timezone

import pytest

from channel_tasks.config import Config
from channel_tasks.context import PluginContext

from fakes import FakeChatHost, InlineDispatcher, MemoryKVStore


@pytest.fixture
def now():
    # Monday
    return datetime(2024, 6, 3, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def kv():
    return MemoryKVStore()


@pytest.fixture
def host():
    return FakeChatHost()


@pytest.fixture
def dispatcher():
    return InlineDispatcher()


@pytest.fixture
def ctx(now, kv, host, dispatcher):
    return PluginContext(
        config=Config(timezone="UTC"),
        kv=kv,
        host=host,
        dispatcher=dispatcher,
        bot_user_id="bot",
        clock=lambda: now,
    )
