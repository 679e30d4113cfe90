import pytest

from unblinkingbot import storage
from unblinkingbot.executor import CommandExecutor
from unblinkingbot.models import BotIdentity, InboundMessage

from fakes import BOT_ID, BOT_NAME, CHANNEL_ID, USER_ID, FakeResponder, FakeSession, FakeStore, fake_fetch


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the SQLite database at a temporary directory."""
    monkeypatch.setattr(storage, "DATA_DIR", tmp_path)
    return tmp_path


@pytest.fixture
def identity():
    return BotIdentity(id=BOT_ID, display_name=BOT_NAME)


@pytest.fixture
def make_message():
    def _make(text, sender_id=USER_ID, channel_id=CHANNEL_ID):
        return InboundMessage(text=text, sender_id=sender_id, channel_id=channel_id)
    return _make


@pytest.fixture
def snapshot_entries():
    return {
        "motion::snapshot::frontdoor": {"name": "frontdoor", "url": "http://cam/front.jpg"},
        "motion::snapshot::garage": {"name": "garage", "url": "http://cam/garage.jpg"},
    }


@pytest.fixture
def store(snapshot_entries):
    return FakeStore(snapshot_entries)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def responder():
    return FakeResponder()


@pytest.fixture
def executor(store, session, responder):
    return CommandExecutor(
        store=store,
        session=session,
        responder=responder,
        fetch_snapshot=fake_fetch,
        clock=lambda: 1700000000.123,
    )
