"""
Command classifier.

Decides whether a message is addressed to the bot and, if so, which
command it expresses. Pure functions only; nothing here talks to Slack.
"""

import logging
import re

from .models import BotIdentity, Command, InboundMessage

logger = logging.getLogger(__name__)

# Opens the relevance gate but is not a way of naming the bot
GATE_WORD = "get"


def _contains(text: str, word: str) -> bool:
    """Case-insensitive substring test. Empty words never match."""
    return bool(word) and word.lower() in text.lower()


def mentions_bot(identity: BotIdentity, text: str) -> bool:
    """True if text names the bot by id, display name, or the word 'bot'."""
    return (
        (bool(identity.id) and identity.id in text)
        or _contains(text, identity.display_name)
        or _contains(text, "bot")
    )


def is_addressed(identity: BotIdentity, text: str) -> bool:
    """True if text contains any magic word (bot id, name, "bot" or "get")."""
    return mentions_bot(identity, text) or _contains(text, GATE_WORD)


def classify(identity: BotIdentity, message: InboundMessage) -> Command:
    """
    Derive exactly one command from a message.

    Rules are evaluated in order and the first match wins:
        1. no text, or sent by the bot itself -> NONE
        2. no magic word -> NONE
        3. "snapshot list" / "camera list" -> SNAPSHOT_LIST
        4. "snapshot" -> SNAPSHOT_FETCH
        5. bot id, display name or "bot" -> GREETING
        6. otherwise -> NONE

    "get" opens the gate in step 2 but never produces a greeting on its own.
    """
    text = message.text
    if not text or message.sender_id == identity.id:
        logger.debug("Ignoring message without text or from the bot itself")
        return Command.NONE

    if not is_addressed(identity, text):
        return Command.NONE

    if re.search(r"snapshot list|camera list", text, re.IGNORECASE):
        return Command.SNAPSHOT_LIST
    if re.search(r"snapshot", text, re.IGNORECASE):
        return Command.SNAPSHOT_FETCH
    if mentions_bot(identity, text):
        return Command.GREETING
    return Command.NONE
