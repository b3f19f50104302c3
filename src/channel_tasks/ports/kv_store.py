"""Key-value store interface."""

from typing import Protocol


class StoreError(Exception):
    """Raised when the key-value store cannot read or write."""

    pass


class KVStore(Protocol):
    """Interface for the host's key-value persistence."""

    def get(self, key: str) -> bytes | None:
        """Read a value. Returns None if the key is absent. Raises StoreError on failure."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Write a value. Raises StoreError on failure."""
        ...
