"""Tests for the Slack session and responder adapters."""

from unittest.mock import MagicMock

import pytest
import requests
from slack_sdk.errors import SlackApiError

from unblinkingbot.errors import DeliveryError, IdentityError
from unblinkingbot.slack import SlackResponder, SlackSession, fetch_snapshot


def _api_error(code):
    return SlackApiError(message=code, response={"ok": False, "error": code})


def test_session_reads_bot_id_once():
    client = MagicMock()
    client.auth_test.return_value = {"user_id": "U0BOT", "user": "unblinkingbot"}
    session = SlackSession(client)

    assert session.active_account_id == "U0BOT"
    assert session.active_account_id == "U0BOT"
    client.auth_test.assert_called_once()


def test_session_identity_uses_users_info():
    client = MagicMock()
    client.users_info.return_value = {"ok": True, "user": {"id": "U0BOT", "name": "camerabot"}}
    session = SlackSession(client, bot_user_id="U0BOT")

    identity = session.get_identity()

    assert identity.id == "U0BOT"
    assert identity.display_name == "camerabot"
    client.users_info.assert_called_once_with(user="U0BOT")


def test_unknown_user_raises_identity_error():
    client = MagicMock()
    client.users_info.side_effect = _api_error("user_not_found")

    with pytest.raises(IdentityError, match="user_not_found"):
        SlackSession(client, bot_user_id="U0BOT").get_display_name("U404")


def test_auth_failure_raises_identity_error():
    client = MagicMock()
    client.auth_test.side_effect = _api_error("invalid_auth")

    with pytest.raises(IdentityError):
        SlackSession(client).active_account_id


def test_post_message_sends_as_bot_with_full_parse():
    client = MagicMock()
    SlackResponder(client).post_message("C1", "hello")

    client.chat_postMessage.assert_called_once_with(
        channel="C1", text="hello", as_user=True, parse="full"
    )


def test_post_message_failure_raises_delivery_error():
    client = MagicMock()
    client.chat_postMessage.side_effect = _api_error("channel_not_found")

    with pytest.raises(DeliveryError, match="channel_not_found"):
        SlackResponder(client).post_message("C1", "hello")


def test_upload_file_passes_caption_and_channel():
    client = MagicMock()
    SlackResponder(client).upload_file(
        filename="snapshot_garage_1.jpg",
        file_stream=b"jpeg",
        title="Snapshot of garage",
        channel_id="C1",
        caption="Here's that picture of the garage that you wanted.",
    )

    client.files_upload_v2.assert_called_once_with(
        file=b"jpeg",
        filename="snapshot_garage_1.jpg",
        title="Snapshot of garage",
        channel="C1",
        initial_comment="Here's that picture of the garage that you wanted.",
    )


def test_upload_failure_raises_delivery_error():
    client = MagicMock()
    client.files_upload_v2.side_effect = _api_error("not_in_channel")

    with pytest.raises(DeliveryError):
        SlackResponder(client).upload_file("f.jpg", b"", "t", "C1", "c")


def test_fetch_snapshot_returns_body(monkeypatch):
    response = MagicMock(content=b"jpeg-bytes")
    get = MagicMock(return_value=response)
    monkeypatch.setattr(requests, "get", get)

    assert fetch_snapshot("http://cam/front.jpg", timeout=3) == b"jpeg-bytes"
    get.assert_called_once_with("http://cam/front.jpg", timeout=3)


def test_fetch_snapshot_http_error_raises_delivery_error(monkeypatch):
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
    monkeypatch.setattr(requests, "get", MagicMock(return_value=response))

    with pytest.raises(DeliveryError, match="404"):
        fetch_snapshot("http://cam/missing.jpg")


def test_identity_without_bot_name_keeps_id():
    client = MagicMock()
    client.users_info.side_effect = _api_error("ratelimited")

    identity = SlackSession(client, bot_user_id="U0BOT").get_identity()

    assert identity.id == "U0BOT"
    assert identity.display_name == ""
