"""
Central message dispatcher for the unblinking bot.

Handles:
- Turning Slack message events into inbound messages
- Classifying each message against the bot's current identity
- Running the matching command and recording usage
- Keeping every failure inside the single message that caused it
"""

import logging
from typing import Optional

from .classifier import classify
from .executor import CommandExecutor
from .models import Command, ExecutionResponse, HandlerResult, InboundMessage, MessagingSession
from .storage import UsageLogger

logger = logging.getLogger(__name__)


class Dispatcher:
    """Routes each inbound message to at most one command."""

    def __init__(
        self,
        session: MessagingSession,
        executor: CommandExecutor,
        usage_logger: Optional[UsageLogger] = None
    ):
        self.session = session
        self.executor = executor
        self.usage_logger = usage_logger

    def handle_event(self, event: dict) -> Optional[ExecutionResponse]:
        """Handle a raw Slack message event."""
        return self.handle_message(InboundMessage.from_event(event))

    def handle_message(self, message: InboundMessage) -> Optional[ExecutionResponse]:
        """
        Classify and execute a single message.

        Args:
            message: The inbound message

        Returns:
            The executor's response, or None if the message was not
            classified (no identity, or an unexpected failure)
        """
        command = Command.NONE
        try:
            # No text, or our own message: drop before any Slack lookup
            if not message.text or message.sender_id == self.session.active_account_id:
                logger.debug(f"Ignoring message in {message.channel_id}")
                return ExecutionResponse(command=command, result=HandlerResult.NO_ACTION)

            identity = self.session.get_identity()
            command = classify(identity, message)

            if command is Command.NONE:
                return ExecutionResponse(command=command, result=HandlerResult.NO_ACTION)

            logger.info(
                f"Command '{command.value}' from {message.sender_id} in {message.channel_id}"
            )
            response = self.executor.execute(command, message)
            self._record(message, response)
            return response

        except Exception as e:
            logger.exception(f"Error handling message in {message.channel_id}")
            if self.usage_logger is not None:
                self._safe_log_error(message, command, str(e))
            return None

    def _record(self, message: InboundMessage, response: ExecutionResponse) -> None:
        """Write the outcome to the usage log."""
        if self.usage_logger is None:
            return

        self.usage_logger.log_command(
            message.sender_id,
            response.command.value,
            message.text,
            response.metadata
        )
        if response.error:
            self.usage_logger.log_error(
                message.sender_id, response.command.value, response.error
            )

    def _safe_log_error(self, message: InboundMessage, command: Command, error: str) -> None:
        try:
            self.usage_logger.log_error(message.sender_id, command.value, error)
        except Exception:
            logger.exception("Failed to record error in usage log")
