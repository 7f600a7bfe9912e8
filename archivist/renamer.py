"""
Dead-channel renaming.

A dead channel is renamed to ``<dead_prefix><normalized name>`` so that it can
be archived later. Every failure is reported to the admin channel and turned
into a RenameOutcome; nothing is raised to the caller.
"""

import logging

from .config import ArchivistConfig
from .errors import RenameOutcome, SlackApiError
from .resolver import ChannelResolver
from .slack_api import SlackApi

logger = logging.getLogger(__name__)


class ChannelRenamer:
    """Marks channels as dead by renaming them with the dead prefix."""

    def __init__(self, api: SlackApi, resolver: ChannelResolver, config: ArchivistConfig):
        self.api = api
        self.resolver = resolver
        self.config = config

    def dead_name(self, normalized_name: str) -> str:
        return f"{self.config.dead_prefix}{normalized_name}"

    def mark_dead(self, channel_id: str) -> RenameOutcome:
        """
        Rename a channel to its dead form.

        Args:
            channel_id: Channel to rename

        Returns:
            RENAMED on success, otherwise the reason the rename did not happen
        """
        info = self.api.channel_info(channel_id)
        if not info.get("ok"):
            logger.warning(f"Couldn't get info on {channel_id}: {info.get('error')}")
            self.api.notify_admin(f"Failed to get info for rename on <#{channel_id}> :(")
            return RenameOutcome.INFO_FETCH_FAILED

        channel = info.get("channel", {})
        name = channel.get("name_normalized") or channel.get("name", "")

        if name.startswith(self.config.dead_prefix):
            logger.info(f"#{name} is already marked as dead, leaving it alone")
            return RenameOutcome.ALREADY_MARKED

        new_name = self.dead_name(name)

        try:
            if self.resolver.resolve_channel_id(new_name, archived=True) is not None:
                logger.warning(f"An archived channel named #{new_name} already exists")
                self.api.notify_admin(
                    f"An archived copy of <#{channel_id}> already exists, we couldn't archive it."
                )
                return RenameOutcome.ALREADY_EXISTS

            result = self.api.rename_channel(channel_id, new_name)
            if not result.get("ok"):
                raise SlackApiError("conversations.rename", result.get("error", "unknown_error"))
        except SlackApiError as e:
            logger.error(f"Failed to rename dead channel {channel_id}: {e}")
            self.api.notify_admin(f"Failed to rename dead channel <#{channel_id}>! (`{e.error}`)")
            return RenameOutcome.RENAME_FAILED

        logger.info(f"Renamed #{name} to #{new_name}")
        return RenameOutcome.RENAMED
