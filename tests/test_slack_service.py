from unittest.mock import Mock

import pytest
import requests

from thread_sentiment.exceptions import SlackApiError
from thread_sentiment.services.slack_service import SLACK_API_URL, SlackClient


def _response(payload, status=200):
    response = Mock()
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return response


def test_fetch_thread_messages():
    session = Mock()
    session.get.return_value = _response(
        {
            "ok": True,
            "messages": [
                {"ts": "100.000", "thread_ts": "100.000", "text": "root", "user": "U1", "blocks": []},
                {"ts": "101.000", "thread_ts": "100.000", "text": "reply", "user": "U2"},
            ],
        }
    )
    client = SlackClient("xoxb-test", session=session, thread_limit=50)

    messages = client.fetch_thread_messages("C1", "100.000")

    assert [m.ts for m in messages] == ["100.000", "101.000"]
    assert messages[0].is_thread_root
    args, kwargs = session.get.call_args
    assert args[0] == SLACK_API_URL + "conversations.replies"
    assert kwargs["params"] == {"channel": "C1", "ts": "100.000", "inclusive": "true", "limit": 50}
    assert kwargs["headers"]["Authorization"] == "Bearer xoxb-test"


def test_fetch_thread_messages_raises_on_slack_error():
    session = Mock()
    session.get.return_value = _response({"ok": False, "error": "not_in_channel"})
    client = SlackClient("xoxb-test", session=session)
    with pytest.raises(SlackApiError) as exc_info:
        client.fetch_thread_messages("C1", "100.000")
    assert exc_info.value.error == "not_in_channel"


def test_fetch_root_reactions():
    session = Mock()
    session.get.return_value = _response(
        {"ok": True, "message": {"reactions": [{"name": "+1", "count": 3, "users": ["U1"]}]}}
    )
    reactions = SlackClient("t", session=session).fetch_root_reactions("C1", "100.000")
    assert [(r.name, r.count) for r in reactions] == [("+1", 3)]
    assert "users" not in reactions[0].model_dump()


@pytest.mark.parametrize(
    "side_effect, payload",
    [
        (requests.ConnectionError("offline"), None),
        (None, {"ok": False, "error": "missing_scope"}),
        (None, {"ok": True, "message": {}}),
    ],
)
def test_fetch_root_reactions_degrades_to_empty(side_effect, payload):
    session = Mock()
    if side_effect:
        session.get.side_effect = side_effect
    else:
        session.get.return_value = _response(payload)
    assert SlackClient("t", session=session).fetch_root_reactions("C1", "100.000") == []


def test_http_error_becomes_slack_api_error():
    session = Mock()
    session.post.return_value = _response({}, status=500)
    with pytest.raises(SlackApiError):
        SlackClient("t", session=session).open_view("T-1", {"type": "modal"})


def test_update_view_sends_hash():
    session = Mock()
    session.post.return_value = _response({"ok": True})
    SlackClient("t", session=session).update_view("V1", {"type": "modal"}, "h1")
    args, kwargs = session.post.call_args
    assert args[0] == SLACK_API_URL + "views.update"
    assert kwargs["json"] == {"view_id": "V1", "view": {"type": "modal"}, "hash": "h1"}
