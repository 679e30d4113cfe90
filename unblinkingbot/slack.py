"""
Slack implementations of the messaging session and responder.

Translates slack_sdk and requests failures into the pipeline's error types.
"""

import logging
from typing import Any, Optional

import requests
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from .errors import DeliveryError, IdentityError
from .models import MessagingSession, Responder

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 10

# Options applied to every outbound message
MESSAGE_OPTIONS = {"as_user": True, "parse": "full"}


def fetch_snapshot(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> bytes:
    """
    Download a snapshot image.

    Raises:
        DeliveryError: If the image cannot be fetched
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise DeliveryError(f"Could not fetch snapshot from {url}: {e}") from e
    return response.content


class SlackSession(MessagingSession):
    """Bot identity and user names from the Slack Web API."""

    def __init__(self, client: WebClient, bot_user_id: Optional[str] = None):
        self.client = client
        self._bot_user_id = bot_user_id

    @property
    def active_account_id(self) -> str:
        if self._bot_user_id is None:
            try:
                self._bot_user_id = self.client.auth_test()["user_id"]
            except SlackApiError as e:
                raise IdentityError(f"auth.test failed: {e.response['error']}") from e
            logger.info(f"Running as bot user {self._bot_user_id}")
        return self._bot_user_id

    def get_display_name(self, account_id: str) -> str:
        try:
            response = self.client.users_info(user=account_id)
        except SlackApiError as e:
            raise IdentityError(
                f"users.info failed for {account_id}: {e.response['error']}"
            ) from e

        user = response.get("user") or {}
        name = user.get("name")
        if not name:
            raise IdentityError(f"No name for user {account_id}")
        return name


class SlackResponder(Responder):
    """Posts messages and uploads files as the bot user."""

    def __init__(self, client: WebClient):
        self.client = client

    def post_message(self, channel_id: str, text: str) -> Any:
        try:
            return self.client.chat_postMessage(
                channel=channel_id,
                text=text,
                **MESSAGE_OPTIONS
            )
        except SlackApiError as e:
            raise DeliveryError(f"chat.postMessage failed: {e.response['error']}") from e

    def upload_file(
        self,
        filename: str,
        file_stream: bytes,
        title: str,
        channel_id: str,
        caption: str
    ) -> Any:
        try:
            return self.client.files_upload_v2(
                file=file_stream,
                filename=filename,
                title=title,
                channel=channel_id,
                initial_comment=caption
            )
        except SlackApiError as e:
            raise DeliveryError(f"files.upload failed: {e.response['error']}") from e
