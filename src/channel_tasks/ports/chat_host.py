"""Chat host interface."""

from dataclasses import dataclass
from typing import Protocol


@dataclass
class Channel:
    """A chat channel as seen by the task lists."""

    id: str
    display_name: str


class ChatHost(Protocol):
    """Interface for the chat server hosting the task lists."""

    def get_channel(self, channel_id: str) -> Channel:
        """Look up a single channel."""
        ...

    def get_channels_for_user(self, user_id: str) -> list[Channel]:
        """All channels the user belongs to, across teams."""
        ...

    def get_direct_channel(self, user_id: str, other_user_id: str) -> str:
        """Id of the direct-message channel between two users."""
        ...

    def create_post(self, channel_id: str, message: str) -> None:
        """Post a message as the bot."""
        ...
