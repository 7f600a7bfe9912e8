"""
Channel name to channel ID resolution.
"""

import logging
from typing import Optional

from .slack_api import SlackApi

logger = logging.getLogger(__name__)


def normalize_query(display_name_query: str) -> str:
    """Strip whitespace and a leading "#" from user-typed channel names."""
    query = (display_name_query or "").strip()
    if query.startswith("#"):
        query = query[1:]
    return query.strip()


class ChannelResolver:
    """Resolves user-typed channel names to channel IDs via name search."""

    def __init__(self, api: SlackApi):
        self.api = api

    def resolve_channel_id(
        self,
        display_name_query: str,
        archived: bool = True,
    ) -> Optional[str]:
        """
        Find the ID of the channel with exactly this name.

        Search is fuzzy, so only an exact name match on the top result counts.

        Args:
            display_name_query: Channel name, with or without a leading "#"
            archived: Search among archived channels if True, active ones otherwise

        Returns:
            Channel ID, or None if no channel has that exact name

        Raises:
            SlackApiError: if the search itself fails
        """
        query = normalize_query(display_name_query)
        if not query:
            return None

        results = self.api.search_channels(query, archived=archived)
        if not results:
            logger.debug(f"No channel found for {query!r}")
            return None

        top = results[0]
        if top.get("name") != query:
            logger.debug(f"Top search hit {top.get('name')!r} does not match {query!r}")
            return None

        return top.get("id")
