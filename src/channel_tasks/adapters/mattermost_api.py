"""Mattermost API adapter - HTTP client for the chat host."""

import logging

import requests

from channel_tasks.config import Config, load_config
from channel_tasks.ports.chat_host import Channel

logger = logging.getLogger(__name__)

API_PATH = "/api/v4"


class MattermostError(Exception):
    """Raised when a Mattermost API call fails."""

    pass


class MattermostAdapter:
    """
    Mattermost REST API adapter.

    Implements ChatHost protocol. Authenticates as the bot account with a
    personal access token. No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        self._session = session or requests.Session()
        self._bot_user_id = self.config.bot_user_id

    @property
    def base_url(self) -> str:
        return self.config.mattermost_url.rstrip("/") + API_PATH

    def _api_request(self, method: str, endpoint: str, **kwargs) -> dict | list:
        """Make authenticated API request."""
        if not self.config.mattermost_url or not self.config.mattermost_bot_token:
            raise MattermostError("Mattermost URL or bot token not configured.")

        try:
            resp = self._session.request(
                method,
                f"{self.base_url}{endpoint}",
                headers={"Authorization": f"Bearer {self.config.mattermost_bot_token}"},
                timeout=30,
                **kwargs,
            )
        except requests.RequestException as e:
            raise MattermostError(f"{method} {endpoint} failed: {e}") from e

        if resp.status_code >= 400:
            raise MattermostError(f"{method} {endpoint} returned {resp.status_code}: {resp.text}")
        if not resp.content:
            return {}
        return resp.json()

    @property
    def bot_user_id(self) -> str:
        """Bot account id, looked up once if not configured."""
        if not self._bot_user_id:
            me = self._api_request("GET", "/users/me")
            self._bot_user_id = me["id"]
            logger.info(f"Resolved bot user id {self._bot_user_id}")
        return self._bot_user_id

    def get_channel(self, channel_id: str) -> Channel:
        data = self._api_request("GET", f"/channels/{channel_id}")
        return Channel(id=data["id"], display_name=data.get("display_name") or data.get("name", ""))

    def get_channels_for_user(self, user_id: str) -> list[Channel]:
        """All channels the user belongs to, across every team."""
        data = self._api_request("GET", f"/users/{user_id}/channels")
        return [
            Channel(id=c["id"], display_name=c.get("display_name") or c.get("name", ""))
            for c in data
        ]

    def get_direct_channel(self, user_id: str, other_user_id: str) -> str:
        data = self._api_request("POST", "/channels/direct", json=[user_id, other_user_id])
        return data["id"]

    def create_post(self, channel_id: str, message: str) -> None:
        self._api_request("POST", "/posts", json={"channel_id": channel_id, "message": message})
