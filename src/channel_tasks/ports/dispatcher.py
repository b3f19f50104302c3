"""Background work interface."""

from typing import Callable, Protocol


class Dispatcher(Protocol):
    """Interface for running detached units of work."""

    def submit(self, func: Callable, *args) -> None:
        """Run func(*args) in the background. Must not block the caller."""
        ...
