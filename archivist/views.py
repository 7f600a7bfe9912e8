"""
Block Kit modal views.
"""

from typing import Dict

from .payloads import (
    REQUEST_ARCHIVE_ACTION,
    REQUEST_UNARCHIVE_ACTION,
    UNARCHIVE_ACTION,
    UNARCHIVE_BLOCK,
)

UNARCHIVE_CALLBACK_ID = "archivist_unarchive"
ARCHIVE_CALLBACK_ID = "archivist_archive"


def _text(text: str) -> Dict:
    return {"type": "plain_text", "text": text, "emoji": True}


def _mrkdwn_section(text: str) -> Dict:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def request_init(user_id: str, bot_name: str = "Archivist") -> Dict:
    """Opening menu: archive or unarchive."""
    return {
        "type": "modal",
        "title": _text(bot_name),
        "close": _text("Close"),
        "blocks": [
            _mrkdwn_section(
                f"Hi there <@{user_id}>, I'm {bot_name}! "
                "I can help you out with all of your channel archiving needs."
            ),
            {"type": "divider"},
            {
                "type": "section",
                "text": _text("Would you like to request an archive or unarchive today?"),
            },
            {
                "type": "actions",
                "elements": [
                    {
                        "type": "button",
                        "text": _text("Archive (WIP)"),
                        "value": REQUEST_ARCHIVE_ACTION,
                        "action_id": REQUEST_ARCHIVE_ACTION,
                        "style": "danger",
                    },
                    {
                        "type": "button",
                        "text": _text("Unarchive"),
                        "value": REQUEST_UNARCHIVE_ACTION,
                        "action_id": REQUEST_UNARCHIVE_ACTION,
                        "style": "primary",
                    },
                ],
            },
        ],
    }


def request_unarchive() -> Dict:
    """Form asking which channel to unarchive."""
    return {
        "type": "modal",
        "callback_id": UNARCHIVE_CALLBACK_ID,
        "title": _text("Unarchive channel"),
        "submit": _text("Submit"),
        "close": _text("Cancel"),
        "blocks": [
            _mrkdwn_section("Awesome! What channel would you like to :unlock: unarchive?"),
            {"type": "divider"},
            {
                "type": "input",
                "block_id": UNARCHIVE_BLOCK,
                "element": {"type": "plain_text_input", "action_id": UNARCHIVE_ACTION},
                "label": _text("Select a channel (eg. #lounge)"),
            },
        ],
    }


def request_archive(inactivity_days: int) -> Dict:
    """Archive requests are not supported yet; explain what happens instead."""
    return {
        "type": "modal",
        "callback_id": ARCHIVE_CALLBACK_ID,
        "title": _text("Archivist"),
        "close": _text("Close"),
        "blocks": [
            _mrkdwn_section(
                "Sorry, we don't support requesting archives right now :disappointed: "
                "Check back later for more info."
            ),
            {
                "type": "context",
                "elements": [
                    _text(
                        "Note: Channels will still be auto-archived after "
                        f"{inactivity_days} days of inactivity!"
                    )
                ],
            },
        ],
    }
