"""Tests for Slack event wiring."""

from unittest.mock import MagicMock

import main


class FakeApp:
    def __init__(self):
        self.handlers = {}

    def event(self, name):
        def register(func):
            self.handlers[name] = func
            return func
        return register


def test_plain_messages_reach_dispatcher():
    app, dispatcher = FakeApp(), MagicMock()
    main.register_events(app, dispatcher)

    event = {"type": "message", "text": "bot snapshot list", "user": "U1", "channel": "C1"}
    app.handlers["message"](event)

    dispatcher.handle_event.assert_called_once_with(event)


def test_message_subtypes_are_skipped():
    app, dispatcher = FakeApp(), MagicMock()
    main.register_events(app, dispatcher)

    app.handlers["message"]({"type": "message", "subtype": "message_changed", "channel": "C1"})

    dispatcher.handle_event.assert_not_called()


def test_mentions_do_not_dispatch_twice():
    app, dispatcher = FakeApp(), MagicMock()
    main.register_events(app, dispatcher)

    app.handlers["app_mention"]({"type": "app_mention", "text": "<@U0BOT> hi", "channel": "C1"})

    dispatcher.handle_event.assert_not_called()


def test_build_dispatcher_wires_collaborators(data_dir):
    app = MagicMock()
    config = main.BotConfig(data_dir=data_dir, upload_workers=3)

    dispatcher = main.build_dispatcher(app, config)

    assert dispatcher.executor.upload_workers == 3
    assert dispatcher.session.client is app.client
    assert dispatcher.executor.responder.client is app.client
