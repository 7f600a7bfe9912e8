"""
ArchivistRunner - Core orchestrator.

The runner owns:
- Slack Web API client and credentials
- Channel resolver, dead-channel renamer and inactivity sweeper
- Unarchive and archive-request handling

The adapter (SlackAdapter) owns the Slack interface: request verification,
acknowledgement, modals and reactions.
"""

import logging
from typing import List, Optional, Tuple

from .config import ArchivistConfig
from .errors import ArchiveRequestNotImplemented, SlackApiError, SweepInProgressError
from .payloads import ArchiveSubmission, UnarchiveSubmission
from .renamer import ChannelRenamer
from .resolver import ChannelResolver, normalize_query
from .slack_api import SlackApi
from .sweeper import Sweeper

logger = logging.getLogger(__name__)


class ArchivistRunner:
    """
    Core orchestrator for channel lifecycle management.

        config = ArchivistConfig.from_env()
        ArchivistRunner(config).start()
    """

    def __init__(
        self,
        config: ArchivistConfig,
        adapter=None,
        api: Optional[SlackApi] = None,
        sweeper: Optional[Sweeper] = None,
    ):
        self.config = config

        self.api = api or SlackApi(config)
        self.resolver = ChannelResolver(self.api)
        self.renamer = ChannelRenamer(self.api, self.resolver, config)
        self.sweeper = sweeper or Sweeper(self.api, self.renamer, config)

        # Lazy import keeps slack_bolt out of the way for tests and scripts
        if adapter is not None:
            self.adapter = adapter
        else:
            from .slack_adapter import SlackAdapter

            self.adapter = SlackAdapter(config)

    def check_old_channels(self) -> List[str]:
        """
        Run a sweep and announce every channel marked as dead.

        Sweep-level failures are reported to the admin channel, never raised.

        Returns:
            IDs of channels renamed by this sweep
        """
        logger.info("Checking for outdated channels")
        try:
            renamed = self.sweeper.sweep()
        except SweepInProgressError:
            logger.info("Sweep already running, ignoring trigger")
            self.api.notify_admin("A channel sweep is already running, hang tight.")
            return []
        except Exception as e:
            logger.error(f"Error while looking for dead channels: {e}", exc_info=True)
            self.api.notify_admin(f"Error while looking for dead channels! Trace: ```{e}```")
            return []

        for channel_id in renamed:
            self.api.notify_admin(f"Marked <#{channel_id}> for archival due to inactivity")
        return renamed

    def find_archived_channel(
        self, submission: UnarchiveSubmission
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Look up the archived channel named in an unarchive submission.

        Returns:
            (channel_id, None) if found, otherwise (None, error message for the form field)
        """
        name = normalize_query(submission.channel_name)
        try:
            channel_id = self.resolver.resolve_channel_id(submission.channel_name, archived=True)
        except SlackApiError as e:
            logger.error(f"Channel search failed for #{name}: {e}")
            return None, "Couldn't look up that channel right now, try again later."

        if channel_id is None:
            logger.info(f"No archived channel named #{name}")
            return None, f"Couldn't find an archived channel called #{name}."

        return channel_id, None

    def unarchive(self, submission: UnarchiveSubmission, channel_id: str) -> bool:
        """
        Unarchive a channel and welcome everyone back.

        Runs after the form is acknowledged, so failures go to the admin channel.

        Returns:
            True if the channel was unarchived
        """
        result = self.api.unarchive_channel(channel_id)
        if not result.get("ok"):
            self.api.notify_admin(
                f"<@{submission.user_id}> tried to unarchive <#{channel_id}> but it failed "
                f"(`{result.get('error')}`)"
            )
            return False

        logger.info(f"{submission.user_id} unarchived {channel_id}")
        self.api.post_message(
            channel_id,
            f"<@{submission.user_id}> unarchived this channel! Welcome back, everyone :wave:",
        )
        return True

    def request_archive(self, submission: ArchiveSubmission):
        """Archive requests are not supported yet."""
        logger.error(f"{submission.user_id} submitted an archive request for {submission.channel_id}")
        raise ArchiveRequestNotImplemented()

    def start(self, **adapter_kwargs):
        """Start the bot via its adapter."""
        logger.info(f"Starting {self.config.bot_name} v{self.config.version}...")
        self.adapter.start(self, **adapter_kwargs)
