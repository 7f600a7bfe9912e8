"""
SlackAdapter - Slack interface for Archivist.

Handles request verification, acknowledgement, slash command, message events,
modal actions and submissions. Routes typed commands to ArchivistRunner.
"""

import logging
import re
import signal
import sys

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

from .config import ArchivistConfig
from .payloads import (
    REQUEST_ARCHIVE_ACTION,
    REQUEST_UNARCHIVE_ACTION,
    UNARCHIVE_BLOCK,
    ArchiveSubmission,
    CheckChannels,
    CheckOnline,
    EmptySubmission,
    RequestArchive,
    UnarchiveSubmission,
    parse_action,
    parse_command,
    parse_message_event,
    parse_view_submission,
)
from .signature import verify_request_middleware
from .views import request_archive, request_init, request_unarchive

logger = logging.getLogger(__name__)

WORKING_REACTION = "hourglass_flowing_sand"
DONE_REACTION = "heavy_check_mark"


class SlackAdapter:
    """Slack adapter over Socket Mode or HTTP. Routes commands to an ArchivistRunner."""

    def __init__(self, config: ArchivistConfig):
        self.config = config
        self.runner = None

    def start(self, runner, register_signals: bool = True):
        """Start Slack, routing commands to runner."""
        self.runner = runner
        self.app = App(
            token=self.config.bot_token,
            signing_secret=self.config.signing_secret,
            request_verification_enabled=False,
        )
        self.app.use(verify_request_middleware(self.config.signing_secret))
        self._register_handlers()

        if register_signals:
            signal.signal(signal.SIGTERM, self._shutdown_handler)
            signal.signal(signal.SIGINT, self._shutdown_handler)

        self._post_status(
            f":white_check_mark: {self.config.bot_name} v{self.config.version} is online!"
        )

        if self.config.app_token:
            SocketModeHandler(self.app, self.config.app_token).start()
        else:
            self.app.start(port=self.config.port, path="/slack/events")

    def _register_handlers(self):
        """Register Slack listeners."""

        @self.app.command(self.config.slash_command)
        def handle_command(ack, body, client):
            ack()
            self._handle_command(body, client)

        @self.app.event("message")
        def handle_message(event):
            self._handle_message(event)

        @self.app.action(re.compile(f"^({REQUEST_ARCHIVE_ACTION}|{REQUEST_UNARCHIVE_ACTION})$"))
        def handle_action(ack, body, client):
            ack()
            self._handle_action(body, client)

        @self.app.view(re.compile(r"^archivist_"))
        def handle_submission(ack, body):
            self._handle_submission(ack, body)

        @self.app.error
        def handle_error(error, body):
            logger.error(f"Unhandled error in Slack listener: {error}", exc_info=error)

    def _handle_command(self, body, client):
        """Slash command: open the menu. The request is already acknowledged."""
        command = parse_command(body)
        logger.info(
            f"User {command.user_id} opened the menu with trigger ID {command.trigger_id}"
        )
        client.views_open(
            trigger_id=command.trigger_id,
            view=request_init(command.user_id, self.config.bot_name),
        )

    def _handle_message(self, event):
        """Message events: online check and sweep trigger."""
        command = parse_message_event(event)

        if isinstance(command, CheckOnline):
            self.runner.api.add_reaction(command.channel, command.ts, DONE_REACTION)

        elif isinstance(command, CheckChannels):
            if command.channel != self.config.admin_channel:
                logger.info(f"Ignoring sweep trigger outside the admin channel ({command.channel})")
                return
            api = self.runner.api
            api.add_reaction(command.channel, command.ts, WORKING_REACTION)
            try:
                self.runner.check_old_channels()
            finally:
                api.remove_reaction(command.channel, command.ts, WORKING_REACTION)
            api.add_reaction(command.channel, command.ts, DONE_REACTION)

    def _handle_action(self, body, client):
        """Menu buttons: push the matching modal on top of the menu."""
        action = parse_action(body)
        if isinstance(action, RequestArchive):
            logger.info(f"User {action.user_id} requested an archive")
            view = request_archive(self.config.inactivity_days)
        else:
            logger.info(f"User {action.user_id} requested an unarchive")
            view = request_unarchive()
        client.views_push(trigger_id=action.trigger_id, view=view)

    def _handle_submission(self, ack, body):
        """Modal submissions. Acknowledges with errors or by clearing the modals."""
        submission = parse_view_submission(body)

        if isinstance(submission, UnarchiveSubmission):
            # Only the lookup runs before ack; its result decides the field error
            channel_id, error = self.runner.find_archived_channel(submission)
            if error:
                ack(response_action="errors", errors={UNARCHIVE_BLOCK: error})
                return
            ack(response_action="clear")
            self.runner.unarchive(submission, channel_id)

        elif isinstance(submission, ArchiveSubmission):
            self.runner.request_archive(submission)

        elif isinstance(submission, EmptySubmission):
            ack(response_action="clear")

    def _post_status(self, message: str):
        """Post to the admin channel."""
        if self.runner:
            self.runner.api.notify_admin(message)

    def _shutdown_handler(self, signum, frame):
        """Graceful shutdown."""
        logger.info("Shutdown signal received...")
        self._post_status(
            f":warning: {self.config.bot_name} v{self.config.version} is shutting down..."
        )
        sys.exit(0)
