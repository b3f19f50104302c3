"""Configuration management for Channel Tasks."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

CHANNEL_TASKS_HOME = Path(os.environ.get("CHANNEL_TASKS_HOME", Path.home() / "channel-tasks"))
CONFIG_FILE = CHANNEL_TASKS_HOME / "config" / "channel-tasks.conf"
DATA_DIR = CHANNEL_TASKS_HOME / "data"


@dataclass
class Config:
    """Channel Tasks configuration."""

    mattermost_url: str = ""
    mattermost_bot_token: str = ""
    bot_user_id: str = ""
    timezone: str = "UTC"
    data_dir: str = ""
    host: str = "127.0.0.1"
    port: int = 8065
    # Verification tokens Mattermost sends with slash commands / outgoing webhooks
    command_token: str = ""
    webhook_token: str = ""
    log_level: str = "INFO"

    @property
    def data_path(self) -> Path:
        """Directory holding the key-value files."""
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from channel-tasks.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "mattermost_url":
                config.mattermost_url = value
            case "mattermost_bot_token":
                config.mattermost_bot_token = value
            case "bot_user_id":
                config.bot_user_id = value
            case "timezone":
                try:
                    ZoneInfo(value)
                    config.timezone = value
                except (ZoneInfoNotFoundError, ValueError):
                    logger.warning(f"Invalid TIMEZONE value: {value}")
            case "data_dir":
                config.data_dir = value
            case "host":
                config.host = value
            case "port":
                try:
                    config.port = int(value)
                except ValueError:
                    logger.warning(f"Invalid PORT value: {value}")
            case "command_token":
                config.command_token = value
            case "webhook_token":
                config.webhook_token = value
            case "log_level":
                config.log_level = value.upper()

    return config
