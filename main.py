"""
Unblinking Slack Bot - Main Entry Point

Listens to every channel the bot is in and:
- Lists stored camera snapshots on request
- Uploads requested snapshots
- Answers when someone says its name
"""

import os
import sys
import argparse
import logging
from functools import partial

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

from unblinkingbot.config import BotConfig, ConfigError, load_bot_config, load_environment
from unblinkingbot.dispatcher import Dispatcher
from unblinkingbot.executor import CommandExecutor
from unblinkingbot.slack import SlackResponder, SlackSession, fetch_snapshot
from unblinkingbot.storage import SqlitePrefixStore, UsageLogger, configure_storage

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Unblinking Slack Bot")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to bot config JSON file (e.g., bots/unblinkingbot.json)"
    )
    return parser.parse_args()


def build_dispatcher(app: App, config: BotConfig) -> Dispatcher:
    """Wire the store, Slack adapters and executor together."""
    configure_storage(config.data_dir)

    session = SlackSession(app.client)
    executor = CommandExecutor(
        store=SqlitePrefixStore(),
        session=session,
        responder=SlackResponder(app.client),
        fetch_snapshot=partial(fetch_snapshot, timeout=config.snapshot_timeout),
        upload_workers=config.upload_workers,
    )
    return Dispatcher(session, executor, usage_logger=UsageLogger())


def register_events(app: App, dispatcher: Dispatcher) -> None:
    """Register Slack event handlers."""

    @app.event("message")
    def handle_message(event):
        """Hand plain user messages to the dispatcher."""
        # Edits, joins and other subtypes carry no new request
        if event.get("subtype"):
            return
        dispatcher.handle_event(event)

    @app.event("app_mention")
    def handle_mention(event):
        """Mentions also arrive as message events, which do the work."""
        logger.debug(f"Mention in {event.get('channel')}")


def main():
    """Start the bot."""
    args = parse_args()

    try:
        config = load_bot_config(args.config)
        load_environment(config.env_file)
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"Starting {config.name}...")

    app = App(token=os.environ["SLACK_BOT_TOKEN"])
    dispatcher = build_dispatcher(app, config)
    register_events(app, dispatcher)

    handler = SocketModeHandler(app, os.environ["SLACK_APP_TOKEN"])

    logger.info("Bot is running! Press Ctrl+C to stop.")
    handler.start()


if __name__ == "__main__":
    main()
