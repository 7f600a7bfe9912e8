"""
Normalization of raw Slack payloads into typed commands.

Slack delivers loosely-typed nested dicts. Each parse_* function converts one
payload kind into one of a small closed set of frozen dataclasses, so the
rest of Archivist never digs through raw payloads.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Union

REQUEST_ARCHIVE_ACTION = "request_archive"
REQUEST_UNARCHIVE_ACTION = "request_unarchive"

UNARCHIVE_BLOCK = "unarchive_channel_input_block"
UNARCHIVE_ACTION = "unarchive_channel_input_action"
ARCHIVE_BLOCK = "archive_channel_select_block"

CHECK_ONLINE_RE = re.compile(r"checkIfOnline")
CHECK_CHANNELS_RE = re.compile(r"checkOldChannels")


@dataclass(frozen=True)
class OpenMenu:
    user_id: str
    trigger_id: str


@dataclass(frozen=True)
class RequestArchive:
    user_id: str
    trigger_id: str


@dataclass(frozen=True)
class RequestUnarchive:
    user_id: str
    trigger_id: str


@dataclass(frozen=True)
class UnarchiveSubmission:
    user_id: str
    channel_name: str


@dataclass(frozen=True)
class ArchiveSubmission:
    user_id: str
    channel_id: Optional[str]


@dataclass(frozen=True)
class EmptySubmission:
    user_id: str


@dataclass(frozen=True)
class CheckOnline:
    channel: str
    ts: str


@dataclass(frozen=True)
class CheckChannels:
    channel: str
    ts: str


Action = Union[RequestArchive, RequestUnarchive]
Submission = Union[UnarchiveSubmission, ArchiveSubmission, EmptySubmission]
MessageCommand = Union[CheckOnline, CheckChannels]


def _require(payload: Dict, key: str) -> str:
    value = payload.get(key)
    if not value:
        raise ValueError(f"Slack payload is missing {key!r}")
    return value


def _user_id(body: Dict) -> str:
    user = body.get("user") or {}
    return _require(user, "id")


def parse_command(body: Dict) -> OpenMenu:
    """Slash command body -> OpenMenu."""
    return OpenMenu(user_id=_require(body, "user_id"), trigger_id=_require(body, "trigger_id"))


def parse_action(body: Dict) -> Action:
    """Block action body -> RequestArchive or RequestUnarchive."""
    actions = body.get("actions") or []
    if not actions:
        raise ValueError("Slack action payload has no actions")

    action_id = actions[0].get("action_id")
    user_id = _user_id(body)
    trigger_id = _require(body, "trigger_id")

    if action_id == REQUEST_ARCHIVE_ACTION:
        return RequestArchive(user_id=user_id, trigger_id=trigger_id)
    if action_id == REQUEST_UNARCHIVE_ACTION:
        return RequestUnarchive(user_id=user_id, trigger_id=trigger_id)
    raise ValueError(f"Unknown action {action_id!r}")


def parse_view_submission(body: Dict) -> Submission:
    """View submission body -> the submission for whichever form was filled in."""
    user_id = _user_id(body)
    values = ((body.get("view") or {}).get("state") or {}).get("values") or {}

    if UNARCHIVE_BLOCK in values:
        element = values[UNARCHIVE_BLOCK].get(UNARCHIVE_ACTION) or {}
        channel_name = (element.get("value") or "").strip()
        if channel_name:
            return UnarchiveSubmission(user_id=user_id, channel_name=channel_name)
        return EmptySubmission(user_id=user_id)

    if ARCHIVE_BLOCK in values:
        element = next(iter(values[ARCHIVE_BLOCK].values()), {})
        channel_id = (
            element.get("selected_channel")
            or element.get("selected_conversation")
            or element.get("value")
        )
        return ArchiveSubmission(user_id=user_id, channel_id=channel_id)

    return EmptySubmission(user_id=user_id)


def parse_message_event(event: Dict) -> Optional[MessageCommand]:
    """Message event -> a bot command, or None for ordinary messages."""
    if event.get("bot_id") or event.get("subtype"):
        return None

    text = event.get("text") or ""
    channel = event.get("channel")
    ts = event.get("ts")
    if not text or not channel or not ts:
        return None

    if CHECK_ONLINE_RE.search(text):
        return CheckOnline(channel=channel, ts=ts)
    if CHECK_CHANNELS_RE.search(text):
        return CheckChannels(channel=channel, ts=ts)
    return None
