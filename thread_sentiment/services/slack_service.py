# thread_sentiment/services/slack_service.py
import logging
from typing import Any, Dict, List, Optional

import requests

from thread_sentiment.exceptions import SlackApiError
from thread_sentiment.schemas.message import SlackMessage, SlackReaction

logger = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api/"


class SlackClient:
    """Minimal Slack Web API client for the methods the shortcut needs."""

    def __init__(
        self,
        token: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
        thread_limit: int = 50,
    ):
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout
        self.thread_limit = thread_limit

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def _handle(self, method: str, r: requests.Response) -> Dict[str, Any]:
        try:
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise SlackApiError(method, str(e)) from e
        if not data.get("ok"):
            raise SlackApiError(method, data.get("error"))
        return data

    def api_get(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            r = self.session.get(SLACK_API_URL + method, params=params, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise SlackApiError(method, str(e)) from e
        return self._handle(method, r)

    def api_post(self, method: str, body: Dict[str, Any]) -> Dict[str, Any]:
        headers = self._headers()
        headers["Content-Type"] = "application/json; charset=utf-8"
        try:
            r = self.session.post(SLACK_API_URL + method, json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise SlackApiError(method, str(e)) from e
        return self._handle(method, r)

    # ----- thread data -----
    def fetch_thread_messages(self, channel_id: str, root_ts: str) -> List[SlackMessage]:
        data = self.api_get(
            "conversations.replies",
            {"channel": channel_id, "ts": root_ts, "inclusive": "true", "limit": self.thread_limit},
        )
        return [SlackMessage(**m) for m in data.get("messages") or []]

    def fetch_root_reactions(self, channel_id: str, root_ts: str) -> List[SlackReaction]:
        """Reactions on the root message; [] when Slack cannot provide them."""
        try:
            data = self.api_get("reactions.get", {"channel": channel_id, "timestamp": root_ts, "full": "true"})
            reactions = (data.get("message") or {}).get("reactions") or []
            return [SlackReaction(**r) for r in reactions]
        except Exception as e:
            logger.warning("Unable to fetch reactions for sentiment modal: %s", e)
            return []

    # ----- modals -----
    def open_view(self, trigger_id: str, view: Dict[str, Any]) -> Dict[str, Any]:
        return self.api_post("views.open", {"trigger_id": trigger_id, "view": view})

    def update_view(self, view_id: str, view: Dict[str, Any], view_hash: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"view_id": view_id, "view": view}
        if view_hash:
            body["hash"] = view_hash
        return self.api_post("views.update", body)
