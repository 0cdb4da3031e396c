"""
Shared fixtures: fake Gemini oracle, fake Slack client and a small emoji table,
so no test needs network access or API keys.
"""
import pytest

from thread_sentiment.schemas.message import SlackMessage, SlackReaction
from thread_sentiment.services.emoji_service import EmojiSentimentTable


class FakeOracle:
    """Replays scripted replies per model; an Exception instance is raised instead."""

    def __init__(self, replies=None, default="0"):
        self.replies = replies or {}
        self.default = default
        self.calls = []

    def generate(self, prompt, model):
        self.calls.append((model, prompt))
        reply = self.replies.get(model, self.default)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def models_called(self):
        return [model for model, _ in self.calls]


class FakeSlack:
    def __init__(self, messages=None, reactions=None, thread_error=None, view_id="V123"):
        self.messages = messages or []
        self.reactions = reactions or []
        self.thread_error = thread_error
        self.view_id = view_id
        self.opened = []
        self.updated = []

    def fetch_thread_messages(self, channel_id, root_ts):
        if self.thread_error:
            raise self.thread_error
        return self.messages

    def fetch_root_reactions(self, channel_id, root_ts):
        return self.reactions

    def open_view(self, trigger_id, view):
        self.opened.append((trigger_id, view))
        return {"ok": True, "view": {"id": self.view_id, "hash": "h1"}} if self.view_id else {"ok": True}

    def update_view(self, view_id, view, view_hash=None):
        self.updated.append((view_id, view, view_hash))
        return {"ok": True}


@pytest.fixture
def emoji_table():
    return EmojiSentimentTable.from_rows(
        [
            {"Emoji": "👍", "Negative": "10", "Neutral": "20", "Positive": "70"},  # 0.6
            {"Emoji": "👎", "Negative": "60", "Neutral": "20", "Positive": "20"},  # -0.4
            {"Emoji": "❤", "Negative": "0", "Neutral": "50", "Positive": "50"},  # 0.5
            {"Unicode codepoint": "0x1f389", "Negative": "0", "Neutral": "0", "Positive": "10"},  # 🎉 1.0
        ]
    )


@pytest.fixture
def fake_oracle():
    return FakeOracle()


@pytest.fixture
def make_message():
    def _make(ts, text, user="U1", thread_ts="100.000"):
        return SlackMessage(ts=ts, text=text, user=user, thread_ts=thread_ts)

    return _make


@pytest.fixture
def reactions():
    return [SlackReaction(name="+1", count=2), SlackReaction(name="tada", count=1)]


@pytest.fixture
def shortcut_payload():
    return {
        "type": "message_action",
        "trigger_id": "T-1",
        "channel": {"id": "C1"},
        "message": {"ts": "100.000", "text": "Ship it on Friday?", "user": "U1"},
    }
