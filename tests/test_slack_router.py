import json
import time
from urllib.parse import urlencode

import pytest
from fastapi.testclient import TestClient

from thread_sentiment.config import Settings, get_settings
from thread_sentiment.dependencies import get_slack_client, get_thread_analyzer
from thread_sentiment.main import create_app
from thread_sentiment.schemas.message import SlackMessage
from thread_sentiment.services.analysis_service import ThreadSentimentAnalyzer
from thread_sentiment.services.signature_service import compute_signature

from conftest import FakeSlack

SECRET = "8f742231b10e8888abcd99yyyzzz85a5"


@pytest.fixture
def slack():
    return FakeSlack(messages=[SlackMessage(ts="100.000", thread_ts="100.000", text="Great work, thanks!")])


def _client(slack, emoji_table, signing_secret=""):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: Settings(slack_signing_secret=signing_secret)
    app.dependency_overrides[get_slack_client] = lambda: slack
    app.dependency_overrides[get_thread_analyzer] = lambda: ThreadSentimentAnalyzer(emoji_table=emoji_table)
    return TestClient(app)


def _body(payload):
    return urlencode({"payload": json.dumps(payload)})


def _signed_headers(body, timestamp=None, secret=SECRET):
    timestamp = str(int(time.time()) if timestamp is None else timestamp)
    return {
        "Content-Type": "application/x-www-form-urlencoded",
        "X-Slack-Request-Timestamp": timestamp,
        "X-Slack-Signature": compute_signature(secret, timestamp, body.encode("utf-8")),
    }


def test_health(slack, emoji_table):
    response = _client(slack, emoji_table).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "message": "Sentiment service running."}


def test_shortcut_is_acknowledged_and_processed(slack, emoji_table, shortcut_payload):
    client = _client(slack, emoji_table)
    response = client.post(
        "/api/slack/sentiment",
        content=_body(shortcut_payload),
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    assert response.content == b""
    assert slack.opened[0][0] == "T-1"
    assert slack.updated[0][1]["callback_id"] == "sentiment_score_result"


def test_missing_payload(slack, emoji_table):
    response = _client(slack, emoji_table).post(
        "/api/slack/sentiment", content="foo=bar", headers={"Content-Type": "application/x-www-form-urlencoded"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing Slack payload."
    assert slack.opened == []


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]"])
def test_invalid_payload(slack, emoji_table, raw):
    response = _client(slack, emoji_table).post(
        "/api/slack/sentiment",
        content=urlencode({"payload": raw}),
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid Slack payload."


def test_valid_signature_accepted(slack, emoji_table, shortcut_payload):
    body = _body(shortcut_payload)
    client = _client(slack, emoji_table, signing_secret=SECRET)
    response = client.post("/api/slack/sentiment", content=body, headers=_signed_headers(body))
    assert response.status_code == 200
    assert slack.updated


@pytest.mark.parametrize(
    "headers_factory, detail",
    [
        (lambda body: {"Content-Type": "application/x-www-form-urlencoded"}, "Missing Slack signature headers."),
        (lambda body: _signed_headers(body, timestamp=int(time.time()) - 600), "Stale Slack request."),
        (lambda body: _signed_headers(body, secret="wrong-secret"), "Invalid Slack signature."),
    ],
)
def test_bad_signatures_rejected(slack, emoji_table, shortcut_payload, headers_factory, detail):
    body = _body(shortcut_payload)
    client = _client(slack, emoji_table, signing_secret=SECRET)
    response = client.post("/api/slack/sentiment", content=body, headers=headers_factory(body))
    assert response.status_code == 400
    assert response.json()["detail"] == detail
    assert slack.opened == []
