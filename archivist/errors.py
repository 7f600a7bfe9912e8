"""
Exceptions and outcome types shared across Archivist.

Expected outcomes (channel not found, duplicate dead channel) are returned,
not raised. Exceptions are reserved for failures that must stop an operation.
"""

from enum import Enum


class RenameOutcome(Enum):
    """Result of marking a single channel as dead."""

    RENAMED = "renamed"
    ALREADY_MARKED = "already_marked"
    ALREADY_EXISTS = "already_exists"
    INFO_FETCH_FAILED = "info_fetch_failed"
    RENAME_FAILED = "rename_failed"

    @property
    def ok(self) -> bool:
        return self is RenameOutcome.RENAMED


class SlackApiError(Exception):
    """A Slack call failed where a partial result is not acceptable."""

    def __init__(self, method: str, error: str):
        super().__init__(f"{method} failed: {error}")
        self.method = method
        self.error = error


class DirectoryFetchError(Exception):
    """The exclusion directory could not be fetched or decoded."""


class SweepInProgressError(Exception):
    """A sweep was triggered while another one is still running."""


class ArchiveRequestNotImplemented(NotImplementedError):
    """Archive requests from users are not supported yet."""

    def __init__(self, message: str = "Archive requests are not yet implemented"):
        super().__init__(message)
