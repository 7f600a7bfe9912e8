"""
Slack Web API client - thin httpx wrapper over the methods Archivist uses.

Calls return the decoded Slack payload. Transport failures, timeouts and
rate limits are folded into ``{"ok": False, "error": ...}`` so callers branch
on ``ok`` the same way for every kind of failure. Nothing is retried.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import ArchivistConfig
from .errors import SlackApiError

logger = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api"
EDGE_API_URL = "https://edgeapi.slack.com/cache"
PAGE_SIZE = 200


class SlackApi:
    """Slack Web API client bound to Archivist's credentials.

    The bot token is used by default; rename and unarchive use the elevated
    admin token, and channel search uses the search token.
    """

    def __init__(self, config: ArchivistConfig):
        self.config = config
        self.client = httpx.Client(timeout=config.http_timeout)

    def _call(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> Dict:
        """GET with params, or POST a JSON payload, to a Web API method."""
        url = f"{SLACK_API_URL}/{method}"
        headers = {"Authorization": f"Bearer {token or self.config.bot_token}"}

        try:
            if payload is not None:
                response = self.client.post(url, headers=headers, json=payload)
            else:
                response = self.client.get(url, headers=headers, params=params)
            data = response.json()
        except httpx.TimeoutException:
            logger.error(f"Timeout calling {method}")
            return {"ok": False, "error": "timeout"}
        except httpx.HTTPError as e:
            logger.error(f"Error calling {method}: {e}")
            return {"ok": False, "error": str(e)}
        except ValueError:
            logger.error(f"Invalid JSON from {method} (HTTP {response.status_code})")
            return {"ok": False, "error": "invalid_response"}

        if not data.get("ok"):
            logger.warning(f"Slack API error in {method}: {data.get('error')}")
        return data

    def list_channels(self) -> List[Dict]:
        """
        List every non-archived channel visible to the bot, following cursors.

        Raises:
            SlackApiError: if any page fails; a partial list is never returned
        """
        channels: List[Dict] = []
        cursor = None

        while True:
            params = {
                "types": "public_channel,private_channel",
                "exclude_archived": "true",
                "limit": PAGE_SIZE,
            }
            if cursor:
                params["cursor"] = cursor

            data = self._call("conversations.list", params=params)
            if not data.get("ok"):
                raise SlackApiError("conversations.list", data.get("error", "unknown_error"))

            channels.extend(data.get("channels", []))

            cursor = data.get("response_metadata", {}).get("next_cursor")
            if not cursor:
                break

        logger.debug(f"Listed {len(channels)} channels")
        return channels

    def latest_message(self, channel_id: str) -> Dict:
        # conversations.history is Tier 3 rate limited
        return self._call("conversations.history", params={"channel": channel_id, "limit": 1})

    def channel_info(self, channel_id: str) -> Dict:
        return self._call("conversations.info", params={"channel": channel_id})

    def join_channel(self, channel_id: str) -> Dict:
        return self._call("conversations.join", payload={"channel": channel_id})

    def rename_channel(self, channel_id: str, name: str) -> Dict:
        return self._call(
            "conversations.rename",
            payload={"channel": channel_id, "name": name},
            token=self.config.admin_token,
        )

    def unarchive_channel(self, channel_id: str) -> Dict:
        return self._call(
            "conversations.unarchive",
            payload={"channel": channel_id},
            token=self.config.admin_token,
        )

    def post_message(self, channel_id: str, text: str) -> Dict:
        return self._call("chat.postMessage", payload={"channel": channel_id, "text": text})

    def add_reaction(self, channel_id: str, ts: str, name: str) -> Dict:
        return self._call(
            "reactions.add",
            payload={"channel": channel_id, "timestamp": ts, "name": name},
        )

    def remove_reaction(self, channel_id: str, ts: str, name: str) -> Dict:
        return self._call(
            "reactions.remove",
            payload={"channel": channel_id, "timestamp": ts, "name": name},
        )

    def notify_admin(self, text: str) -> bool:
        """Post a notice to the admin channel. Returns True if it was delivered."""
        return bool(self.post_message(self.config.admin_channel, text).get("ok"))

    def search_channels(self, query: str, archived: bool = True) -> List[Dict]:
        """
        Search channels by name via the edge cache API.

        The edge API is undocumented but avoids listing every channel to find
        one by name. It returns fuzzy matches, best first.

        Args:
            query: Channel name to search for
            archived: Search archived channels if True, active ones otherwise

        Returns:
            List of {"id": ..., "name": ...} results (at most one)

        Raises:
            SlackApiError: if the search cannot be completed
        """
        url = f"{EDGE_API_URL}/{self.config.team_id}/channels/search"
        body = {
            "token": self.config.effective_search_token,
            "query": query,
            "count": 1,
            "filter": "archived" if archived else "exclude_archived",
        }

        try:
            data = self.client.post(url, json=body).json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error searching channels for {query!r}: {e}")
            raise SlackApiError("channels.search", str(e)) from e

        if not isinstance(data, dict):
            raise SlackApiError("channels.search", "bad_payload")

        results = data.get("results")
        if data.get("ok") is False or not isinstance(results, list):
            error = data.get("error", "no_results_field")
            logger.warning(f"Channel search failed for {query!r}: {error}")
            raise SlackApiError("channels.search", error)

        return results
