"""
Archivist configuration, loaded once from the environment at startup.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

SECONDS_PER_DAY = 86400

DEFAULT_INACTIVITY_DAYS = 180
DEFAULT_DEAD_PREFIX = "zzz-"
DEFAULT_DIRECTORY_FIELD = "Slack Channel ID"
DEFAULT_COMMAND = "/archivist"
DEFAULT_PORT = 3000

_REQUIRED = {
    "bot_token": "SLACK_BOT_TOKEN",
    "admin_token": "SLACK_ADMIN_TOKEN",
    "signing_secret": "SLACK_SIGNING_SECRET",
    "admin_channel": "SLACK_ADMIN_CHANNEL",
    "team_id": "SLACK_TEAM_ID",
}


@dataclass(frozen=True)
class ArchivistConfig:
    """Process-wide, immutable configuration.

    Required:
        bot_token: General-purpose bot token (xoxb-)
        admin_token: Elevated token used for rename and unarchive
        signing_secret: Slack signing secret for request verification
        admin_channel: Channel ID that receives admin notices
        team_id: Workspace ID, used for channel name search

    Optional:
        search_token: Token for channel name search (defaults to admin_token)
        app_token: Socket Mode app token; HTTP mode is used when absent
        directory_url: JSON endpoint listing channels exempt from sweeping
        directory_field: Record field holding the channel ID
        inactivity_days: Days without messages before a channel is dead
        dead_prefix: Marker prepended to dead channel names
    """

    bot_token: str
    admin_token: str
    signing_secret: str
    admin_channel: str
    team_id: str
    search_token: Optional[str] = None
    app_token: Optional[str] = None
    directory_url: Optional[str] = None
    directory_field: str = DEFAULT_DIRECTORY_FIELD
    inactivity_days: int = DEFAULT_INACTIVITY_DAYS
    dead_prefix: str = DEFAULT_DEAD_PREFIX
    slash_command: str = DEFAULT_COMMAND
    port: int = DEFAULT_PORT
    bot_name: str = "Archivist"
    version: str = "0.1.0"
    http_timeout: float = 10.0

    @property
    def inactivity_threshold(self) -> float:
        """Inactivity threshold in seconds."""
        return self.inactivity_days * SECONDS_PER_DAY

    @property
    def effective_search_token(self) -> str:
        return self.search_token or self.admin_token

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ArchivistConfig":
        """Build a config from environment variables.

        Raises:
            ValueError: if a required variable is missing or a number is malformed
        """
        env = os.environ if environ is None else environ

        missing = [name for name in _REQUIRED.values() if not env.get(name)]
        if missing:
            raise ValueError(f"Missing {', '.join(missing)}")

        values = {field: env[name] for field, name in _REQUIRED.items()}

        return cls(
            **values,
            search_token=env.get("SLACK_SEARCH_TOKEN") or None,
            app_token=env.get("SLACK_APP_TOKEN") or None,
            directory_url=env.get("ARCHIVIST_DIRECTORY_URL") or None,
            directory_field=env.get("ARCHIVIST_DIRECTORY_FIELD", DEFAULT_DIRECTORY_FIELD),
            inactivity_days=_int_env(env, "ARCHIVIST_INACTIVITY_DAYS", DEFAULT_INACTIVITY_DAYS),
            dead_prefix=env.get("ARCHIVIST_DEAD_PREFIX", DEFAULT_DEAD_PREFIX),
            slash_command=env.get("ARCHIVIST_COMMAND", DEFAULT_COMMAND),
            port=_int_env(env, "PORT", DEFAULT_PORT),
        )


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
