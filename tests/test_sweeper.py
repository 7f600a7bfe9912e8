"""Tests for archivist.sweeper"""

import threading
from unittest.mock import MagicMock, patch

import pytest

from archivist.errors import (
    DirectoryFetchError,
    RenameOutcome,
    SlackApiError,
    SweepInProgressError,
)
from archivist.renamer import ChannelRenamer
from archivist.resolver import ChannelResolver
from archivist.sweeper import Sweeper

DAY = 86400
NOW = 1_700_000_000.0
THRESHOLD = 180 * DAY


def _history(days_ago):
    return {"ok": True, "messages": [{"ts": f"{NOW - days_ago * DAY:.6f}", "text": "hi"}]}


@pytest.fixture
def renamer():
    mock = MagicMock()
    mock.mark_dead.return_value = RenameOutcome.RENAMED
    return mock


def _sweeper(api, renamer, config, excluded=frozenset()):
    return Sweeper(api, renamer, config, exclusion_fetcher=lambda: excluded, clock=lambda: NOW)


class TestSweep:
    def test_old_channel_is_marked_dead(self, api, renamer, config):
        api.list_channels.return_value = [{"id": "C1", "name": "old", "is_member": True}]
        api.latest_message.return_value = _history(200)

        result = _sweeper(api, renamer, config).sweep(THRESHOLD)

        assert result == ["C1"]
        renamer.mark_dead.assert_called_once_with("C1")

    def test_old_excluded_channel_is_left_alone(self, api, renamer, config):
        api.list_channels.return_value = [{"id": "C1", "name": "club", "is_member": True}]
        api.latest_message.return_value = _history(200)

        result = _sweeper(api, renamer, config, excluded=frozenset({"C1"})).sweep(THRESHOLD)

        assert result == []
        renamer.mark_dead.assert_not_called()

    def test_recent_channel_is_kept(self, api, renamer, config):
        api.list_channels.return_value = [{"id": "C1", "name": "busy", "is_member": True}]
        api.latest_message.return_value = _history(3)

        assert _sweeper(api, renamer, config).sweep(THRESHOLD) == []
        renamer.mark_dead.assert_not_called()

    def test_exactly_at_threshold_is_kept(self, api, renamer, config):
        api.list_channels.return_value = [{"id": "C1", "name": "edge", "is_member": True}]
        api.latest_message.return_value = _history(180)

        assert _sweeper(api, renamer, config).sweep(THRESHOLD) == []

    def test_default_threshold_from_config(self, api, renamer, config):
        api.list_channels.return_value = [{"id": "C1", "name": "old", "is_member": True}]
        api.latest_message.return_value = _history(179)

        assert _sweeper(api, renamer, config).sweep() == []

        api.latest_message.return_value = _history(181)
        assert _sweeper(api, renamer, config).sweep() == ["C1"]

    def test_channel_without_messages_is_skipped(self, api, renamer, config):
        api.list_channels.return_value = [{"id": "C1", "name": "empty", "is_member": True}]
        api.latest_message.return_value = {"ok": True, "messages": []}

        assert _sweeper(api, renamer, config).sweep(THRESHOLD) == []
        renamer.mark_dead.assert_not_called()
        api.notify_admin.assert_not_called()

    def test_history_failure_notifies_and_skips(self, api, renamer, config):
        api.list_channels.return_value = [
            {"id": "C1", "name": "limited", "is_member": True},
            {"id": "C2", "name": "old", "is_member": True},
        ]
        api.latest_message.side_effect = [{"ok": False, "error": "ratelimited"}, _history(400)]

        result = _sweeper(api, renamer, config).sweep(THRESHOLD)

        assert result == ["C2"]
        api.notify_admin.assert_called_once()
        assert "<#C1>" in api.notify_admin.call_args[0][0]

    def test_joins_channels_before_reading(self, api, renamer, config):
        api.list_channels.return_value = [
            {"id": "C1", "name": "joined", "is_member": True},
            {"id": "C2", "name": "outside", "is_member": False},
        ]
        api.latest_message.return_value = _history(1)
        api.join_channel.return_value = {"ok": True}

        _sweeper(api, renamer, config).sweep(THRESHOLD)

        api.join_channel.assert_called_once_with("C2")

    def test_dead_prefixed_channels_are_skipped(self, api, renamer, config):
        api.list_channels.return_value = [{"id": "C1", "name": "zzz-old", "is_member": False}]

        assert _sweeper(api, renamer, config).sweep(THRESHOLD) == []
        api.join_channel.assert_not_called()
        api.latest_message.assert_not_called()

    def test_failed_rename_is_not_reported_as_renamed(self, api, renamer, config):
        api.list_channels.return_value = [
            {"id": "C1", "name": "a", "is_member": True},
            {"id": "C2", "name": "b", "is_member": True},
        ]
        api.latest_message.return_value = _history(365)
        renamer.mark_dead.side_effect = [RenameOutcome.ALREADY_EXISTS, RenameOutcome.RENAMED]

        assert _sweeper(api, renamer, config).sweep(THRESHOLD) == ["C2"]
        assert renamer.mark_dead.call_count == 2

    def test_malformed_timestamp_is_skipped(self, api, renamer, config):
        api.list_channels.return_value = [{"id": "C1", "name": "odd", "is_member": True}]
        api.latest_message.return_value = {"ok": True, "messages": [{"text": "no ts"}]}

        assert _sweeper(api, renamer, config).sweep(THRESHOLD) == []

    def test_fractional_timestamps(self, api, renamer, config):
        api.list_channels.return_value = [{"id": "C1", "name": "old", "is_member": True}]
        api.latest_message.return_value = {
            "ok": True,
            "messages": [{"ts": f"{NOW - THRESHOLD - 0.5:.6f}"}],
        }

        assert _sweeper(api, renamer, config).sweep(THRESHOLD) == ["C1"]

    def test_directory_failure_aborts(self, api, renamer, config):
        def failing_fetch():
            raise DirectoryFetchError("down")

        sweeper = Sweeper(api, renamer, config, exclusion_fetcher=failing_fetch, clock=lambda: NOW)

        with pytest.raises(DirectoryFetchError):
            sweeper.sweep(THRESHOLD)
        api.list_channels.assert_not_called()

    def test_listing_failure_aborts(self, api, renamer, config):
        api.list_channels.side_effect = SlackApiError("conversations.list", "ratelimited")

        with pytest.raises(SlackApiError):
            _sweeper(api, renamer, config).sweep(THRESHOLD)

    def test_exclusions_fetched_every_sweep(self, api, renamer, config):
        fetch = MagicMock(return_value=frozenset())
        api.list_channels.return_value = []
        sweeper = Sweeper(api, renamer, config, exclusion_fetcher=fetch, clock=lambda: NOW)

        sweeper.sweep(THRESHOLD)
        sweeper.sweep(THRESHOLD)

        assert fetch.call_count == 2

    @patch("archivist.sweeper.fetch_exclusion_set", return_value=frozenset())
    def test_default_fetcher_uses_config(self, mock_fetch, api, renamer, config):
        api.list_channels.return_value = []

        Sweeper(api, renamer, config).sweep(THRESHOLD)

        mock_fetch.assert_called_once_with(None, "Slack Channel ID", timeout=10.0)

    def test_concurrent_sweep_refused(self, api, renamer, config):
        started = threading.Event()
        release = threading.Event()

        def slow_fetch():
            started.set()
            release.wait(5)
            return frozenset()

        api.list_channels.return_value = []
        sweeper = Sweeper(api, renamer, config, exclusion_fetcher=slow_fetch, clock=lambda: NOW)

        worker = threading.Thread(target=sweeper.sweep, args=(THRESHOLD,))
        worker.start()
        started.wait(5)
        try:
            with pytest.raises(SweepInProgressError):
                sweeper.sweep(THRESHOLD)
        finally:
            release.set()
            worker.join(5)

        assert sweeper.sweep(THRESHOLD) == []


class TestSweepEndToEnd:
    def test_three_channels(self, api, config):
        """Old+excluded, old+not excluded, recent: only the second is renamed."""
        api.list_channels.return_value = [
            {"id": "CA", "name": "club-a", "name_normalized": "club-a", "is_member": True},
            {"id": "CB", "name": "stale", "name_normalized": "stale", "is_member": False},
            {"id": "CC", "name": "lively", "name_normalized": "lively", "is_member": True},
        ]
        api.join_channel.return_value = {"ok": True}
        api.latest_message.side_effect = lambda channel_id: {
            "CA": _history(200),
            "CB": _history(200),
            "CC": _history(2),
        }[channel_id]
        api.channel_info.return_value = {
            "ok": True,
            "channel": {"id": "CB", "name": "stale", "name_normalized": "stale"},
        }
        api.search_channels.return_value = []
        api.rename_channel.return_value = {"ok": True}

        renamer = ChannelRenamer(api, ChannelResolver(api), config)
        sweeper = _sweeper(api, renamer, config, excluded=frozenset({"CA"}))

        result = sweeper.sweep(THRESHOLD)

        assert result == ["CB"]
        api.rename_channel.assert_called_once_with("CB", "zzz-stale")
        api.channel_info.assert_called_once_with("CB")
        api.join_channel.assert_called_once_with("CB")
