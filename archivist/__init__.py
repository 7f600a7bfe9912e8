"""
archivist: Slack channel lifecycle bot.

Usage:
    from archivist import ArchivistConfig, ArchivistRunner

    config = ArchivistConfig.from_env()
    ArchivistRunner(config).start()

Sweeps are triggered by posting "checkOldChannels" in the admin channel.
"""

from .config import ArchivistConfig
from .errors import (
    ArchiveRequestNotImplemented,
    DirectoryFetchError,
    RenameOutcome,
    SlackApiError,
    SweepInProgressError,
)
from .directory import fetch_exclusion_set
from .renamer import ChannelRenamer
from .resolver import ChannelResolver
from .runner import ArchivistRunner
from .signature import is_recent, validate
from .slack_api import SlackApi
from .sweeper import Sweeper

__all__ = [
    "ArchivistConfig",
    "ArchivistRunner",
    "SlackApi",
    "ChannelResolver",
    "ChannelRenamer",
    "Sweeper",
    "fetch_exclusion_set",
    "validate",
    "is_recent",
    "RenameOutcome",
    "SlackApiError",
    "DirectoryFetchError",
    "SweepInProgressError",
    "ArchiveRequestNotImplemented",
]
__version__ = "0.1.0"
