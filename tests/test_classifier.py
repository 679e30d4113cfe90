"""Tests for message classification."""

import pytest

from unblinkingbot.classifier import classify, is_addressed, mentions_bot
from unblinkingbot.models import BotIdentity, Command

from fakes import BOT_ID


@pytest.mark.parametrize("text,expected", [
    ("bot snapshot list", Command.SNAPSHOT_LIST),
    ("camera list please, bot", Command.SNAPSHOT_LIST),
    ("BOT, Snapshot List", Command.SNAPSHOT_LIST),
    ("get me a snapshot of frontdoor", Command.SNAPSHOT_FETCH),
    ("get the report", Command.NONE),
    ("hey bot", Command.GREETING),
    ("good morning everyone", Command.NONE),
])
def test_classify(identity, make_message, text, expected):
    assert classify(identity, make_message(text)) is expected


def test_self_message_is_ignored(identity, make_message):
    message = make_message("bot snapshot list", sender_id=BOT_ID)
    assert classify(identity, message) is Command.NONE


@pytest.mark.parametrize("text", ["", None])
def test_missing_text_is_ignored(identity, make_message, text):
    assert classify(identity, make_message(text)) is Command.NONE


def test_snapshot_without_magic_word_is_not_a_command(identity, make_message):
    assert classify(identity, make_message("snapshot of frontdoor")) is Command.NONE


def test_list_wins_over_fetch(identity, make_message):
    assert classify(identity, make_message("get snapshot list")) is Command.SNAPSHOT_LIST


def test_get_alone_never_greets(identity, make_message):
    assert classify(identity, make_message("can I get a coffee")) is Command.NONE


class TestIdentityMatching:
    watcher = BotIdentity(id="UWATCH1", display_name="Watcher")

    def test_display_name_is_case_insensitive(self, make_message):
        assert classify(self.watcher, make_message("hi WATCHER")) is Command.GREETING

    def test_id_is_case_sensitive(self, make_message):
        assert classify(self.watcher, make_message("uwatch1 hello")) is Command.NONE
        assert classify(self.watcher, make_message("<@UWATCH1> hello")) is Command.GREETING

    def test_slack_mention_opens_gate_for_snapshot(self, make_message):
        message = make_message("<@UWATCH1> snapshot garage")
        assert classify(self.watcher, message) is Command.SNAPSHOT_FETCH

    def test_empty_display_name_matches_nothing(self, make_message):
        nameless = BotIdentity(id="UWATCH1", display_name="")
        assert classify(nameless, make_message("hello there")) is Command.NONE


def test_gate_is_wider_than_greeting(identity):
    assert is_addressed(identity, "get it")
    assert not mentions_bot(identity, "get it")
