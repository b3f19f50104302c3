"""Adapters - I/O implementations of ports."""

from .background import BackgroundDispatcher
from .file_kv import FileKVStore
from .mattermost_api import MattermostAdapter, MattermostError

__all__ = [
    "BackgroundDispatcher",
    "FileKVStore",
    "MattermostAdapter",
    "MattermostError",
]
