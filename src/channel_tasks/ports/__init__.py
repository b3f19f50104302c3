"""Ports - interfaces/protocols for external dependencies."""

from .kv_store import KVStore, StoreError
from .chat_host import Channel, ChatHost
from .dispatcher import Dispatcher

__all__ = [
    "KVStore",
    "StoreError",
    "Channel",
    "ChatHost",
    "Dispatcher",
]
