"""
Data models and abstract collaborator interfaces for the unblinking bot.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional
from enum import Enum

from .errors import IdentityError

logger = logging.getLogger(__name__)


SNAPSHOT_PREFIX = "motion::snapshot::"


class Command(Enum):
    """Intent derived from a single inbound message."""
    SNAPSHOT_LIST = "snapshot_list"
    SNAPSHOT_FETCH = "snapshot_fetch"
    GREETING = "greeting"
    NONE = "none"


class HandlerResult(Enum):
    """Outcome of executing a command."""
    SUCCESS = "success"
    ERROR = "error"
    NO_ACTION = "no_action"


@dataclass(frozen=True)
class InboundMessage:
    """A message event delivered by the messaging session."""
    text: Optional[str]
    sender_id: Optional[str]
    channel_id: str

    @classmethod
    def from_event(cls, event: dict) -> "InboundMessage":
        return cls(
            text=event.get("text"),
            sender_id=event.get("user"),
            channel_id=event.get("channel", ""),
        )


@dataclass(frozen=True)
class BotIdentity:
    """The bot's own account, as seen at dispatch time."""
    id: str
    display_name: str


@dataclass(frozen=True)
class SnapshotRecord:
    """A named camera snapshot source kept in the prefix store."""
    key: str
    name: str
    url: str

    def to_dict(self) -> dict:
        return {"name": self.name, "url": self.url}

    @classmethod
    def from_value(cls, key: str, value: Any) -> Optional["SnapshotRecord"]:
        """Build a record from a stored value, or None if it has no name."""
        if not isinstance(value, dict) or not value.get("name"):
            return None
        return cls(key=key, name=str(value["name"]), url=str(value.get("url", "")))


@dataclass
class ExecutionResponse:
    """What a command handler did."""
    command: Command
    result: HandlerResult
    error: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


class PrefixStore(ABC):
    """Key-value store queried by key prefix."""

    @abstractmethod
    def get_by_prefix(self, prefix: str) -> dict[str, Any]:
        """
        Return every entry whose key starts with prefix.

        Raises:
            StoreError: If the underlying storage cannot be read
        """
        pass


class MessagingSession(ABC):
    """Read-only view of the real-time messaging connection."""

    @property
    @abstractmethod
    def active_account_id(self) -> str:
        """The bot's own user id."""
        pass

    @abstractmethod
    def get_display_name(self, account_id: str) -> str:
        """
        Look up the display name for an account.

        Raises:
            IdentityError: If the account is unknown or the lookup fails
        """
        pass

    def get_identity(self) -> BotIdentity:
        """
        The bot's id and name. If the name cannot be resolved it is left
        empty, which the classifier never matches.
        """
        account_id = self.active_account_id
        try:
            display_name = self.get_display_name(account_id)
        except IdentityError as e:
            logger.error(f"Could not resolve bot name, matching by id only: {e}")
            display_name = ""
        return BotIdentity(id=account_id, display_name=display_name)


class Responder(ABC):
    """Sends text and files to a channel."""

    @abstractmethod
    def post_message(self, channel_id: str, text: str) -> Any:
        """
        Send a text message as the bot.

        Raises:
            DeliveryError: If the message could not be delivered
        """
        pass

    @abstractmethod
    def upload_file(
        self,
        filename: str,
        file_stream: bytes,
        title: str,
        channel_id: str,
        caption: str
    ) -> Any:
        """
        Upload a file to a channel with a caption.

        Raises:
            DeliveryError: If the upload failed
        """
        pass
