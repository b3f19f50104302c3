"""Explicit per-process context handed to every handler."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from .adapters import BackgroundDispatcher, FileKVStore, MattermostAdapter, MattermostError
from .config import Config, load_config
from .ports.chat_host import ChatHost
from .ports.dispatcher import Dispatcher
from .ports.kv_store import KVStore
from .store import DailyPrefsStore, TaskListRepository

logger = logging.getLogger(__name__)


@dataclass
class PluginContext:
    """
    Everything a command, HTTP handler or hook needs.

    Built once at startup and passed explicitly; there is no module-level state.
    """

    config: Config
    kv: KVStore
    host: ChatHost
    dispatcher: Dispatcher
    bot_user_id: str = ""
    clock: Callable[[], datetime] | None = None
    tasks: TaskListRepository = field(init=False)
    prefs: DailyPrefsStore = field(init=False)

    def __post_init__(self):
        self.tasks = TaskListRepository(self.kv, clock=self.now)
        self.prefs = DailyPrefsStore(self.kv)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.config.timezone or "UTC")

    def now(self) -> datetime:
        """Current time in the configured timezone."""
        if self.clock:
            return self.clock()
        return datetime.now(self.tz)


def build_context(config: Config | None = None) -> PluginContext:
    """Wire the production adapters from configuration."""
    config = config or load_config()
    host = MattermostAdapter(config)

    bot_user_id = config.bot_user_id
    if not bot_user_id:
        try:
            bot_user_id = host.bot_user_id
        except MattermostError as e:
            logger.warning(f"Could not resolve bot user id: {e}")

    return PluginContext(
        config=config,
        kv=FileKVStore(config.data_path),
        host=host,
        dispatcher=BackgroundDispatcher(timezone=config.timezone or "UTC"),
        bot_user_id=bot_user_id,
    )
