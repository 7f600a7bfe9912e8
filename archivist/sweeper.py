"""
Inactivity sweep - finds channels with no recent messages and marks them dead.

One sweep walks every non-archived channel strictly in sequence: join if
needed, fetch the latest message, compare its age with the threshold, and
rename the channel if it is dead. conversations.history is rate limited, so
there is exactly one request in flight at a time and only one sweep may run
per Sweeper.
"""

import logging
import threading
import time
from typing import Callable, Dict, FrozenSet, List, Optional

from .config import ArchivistConfig
from .directory import fetch_exclusion_set
from .errors import SweepInProgressError
from .renamer import ChannelRenamer
from .slack_api import SlackApi

logger = logging.getLogger(__name__)


class Sweeper:
    """Runs inactivity sweeps over all channels visible to the bot."""

    def __init__(
        self,
        api: SlackApi,
        renamer: ChannelRenamer,
        config: ArchivistConfig,
        exclusion_fetcher: Optional[Callable[[], FrozenSet[str]]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.api = api
        self.renamer = renamer
        self.config = config
        self.exclusion_fetcher = exclusion_fetcher or self._fetch_exclusions
        self.clock = clock
        self._lock = threading.Lock()

    def _fetch_exclusions(self) -> FrozenSet[str]:
        return fetch_exclusion_set(
            self.config.directory_url,
            self.config.directory_field,
            timeout=self.config.http_timeout,
        )

    def sweep(self, threshold_seconds: Optional[float] = None) -> List[str]:
        """
        Find inactive channels and rename them with the dead prefix.

        Per-channel failures are reported to the admin channel and skipped.
        Anything else (directory or channel listing failures) propagates.

        Args:
            threshold_seconds: Inactivity threshold; defaults to the configured one

        Returns:
            IDs of channels that were renamed

        Raises:
            SweepInProgressError: if another sweep is already running
        """
        if not self._lock.acquire(blocking=False):
            raise SweepInProgressError("A sweep is already running")
        try:
            return self._sweep(
                self.config.inactivity_threshold if threshold_seconds is None else threshold_seconds
            )
        finally:
            self._lock.release()

    def _sweep(self, threshold_seconds: float) -> List[str]:
        excluded = self.exclusion_fetcher()
        channels = self.api.list_channels()
        logger.info(
            f"Sweeping {len(channels)} channels "
            f"({len(excluded)} excluded, threshold {threshold_seconds:.0f}s)"
        )

        renamed = []
        for channel in channels:
            if not self._is_dead(channel, threshold_seconds, excluded):
                continue
            if self.renamer.mark_dead(channel["id"]).ok:
                renamed.append(channel["id"])

        logger.info(f"Sweep finished, {len(renamed)} channels marked dead")
        return renamed

    def _is_dead(self, channel: Dict, threshold_seconds: float, excluded: FrozenSet[str]) -> bool:
        channel_id = channel["id"]
        name = channel.get("name_normalized") or channel.get("name", channel_id)

        if name.startswith(self.config.dead_prefix):
            logger.debug(f"#{name} is already marked as dead, skipping")
            return False

        if not channel.get("is_member"):
            joined = self.api.join_channel(channel_id)
            if not joined.get("ok"):
                logger.warning(f"Couldn't join #{name}: {joined.get('error')}")

        history = self.api.latest_message(channel_id)
        if not history.get("ok"):
            logger.warning(f"Failed to get messages for #{name}: {history.get('error')}")
            self.api.notify_admin(f"Experienced an error when getting messages for <#{channel_id}>!")
            return False

        messages = history.get("messages", [])
        if not messages:
            logger.info(f"Couldn't calculate age of #{name} (no messages), ignoring")
            return False

        try:
            last_message_ts = float(messages[0]["ts"])
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Latest message in #{name} has no usable timestamp, ignoring")
            return False

        age = self.clock() - last_message_ts
        if age <= threshold_seconds:
            return False

        if channel_id in excluded:
            logger.info(f"#{name} is inactive but excluded, leaving it alone")
            return False

        logger.info(f"Dead channel found: #{name} ({channel_id}), idle for {age / 86400:.0f} days")
        return True
