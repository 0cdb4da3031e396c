# thread_sentiment/services/modal_service.py
"""Slack modal (Block Kit) builders for the sentiment shortcut."""
from typing import Any, Dict, List, Optional

from thread_sentiment.schemas.message import RootMessage
from thread_sentiment.schemas.sentiment import ThreadSentimentReport
from thread_sentiment.services.analysis_service import trim_text

MODAL_TITLE = "Sentiment Score"
PRIVACY_NOTE = "🔒 Sentiment is calculated on demand and not stored anywhere."


def _mrkdwn(text: str) -> Dict[str, str]:
    return {"type": "mrkdwn", "text": text}


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": _mrkdwn(text)}


def _context(text: str) -> Dict[str, Any]:
    return {"type": "context", "elements": [_mrkdwn(text)]}


def _modal(callback_id: str, blocks: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "type": "modal",
        "callback_id": callback_id,
        "title": {"type": "plain_text", "text": MODAL_TITLE},
        "close": {"type": "plain_text", "text": "Close"},
        "blocks": blocks,
    }


def format_user(user_id: Optional[str]) -> str:
    return f"<@{user_id}>" if user_id else "Someone"


def format_signed(score: float) -> str:
    return f"+{score:.1f}" if score >= 0 else f"{score:.1f}"


def build_loading_view(root: RootMessage) -> Dict[str, Any]:
    return _modal(
        "sentiment_score_loading",
        [
            _section("*Analyzing conversation...*"),
            _context(f"Message snippet:\n>{trim_text(root.text, 120)}"),
        ],
    )


def build_result_view(root: RootMessage, report: ThreadSentimentReport) -> Dict[str, Any]:
    mood = report.mood
    stats = (
        f"{report.analyzed_message_count} messages analyzed"
        f" • Text score: {report.text_score:.1f}"
        f" • Reaction adj: {format_signed(report.reaction_score)}"
    )
    return _modal(
        "sentiment_score_result",
        [
            _section(f"{mood.emoji} *Overall mood:* {mood.label}\n*Combined score:* {report.combined_score:.1f}"),
            _context(stats),
            _section(f"*Message preview*\n{trim_text(root.text, 180)}"),
            _context(f"Posted by {format_user(root.user_id)} in <#{root.channel_id}>"),
            {"type": "divider"},
            _section(f"*Reactions overview*\n{report.reaction_summary_text}"),
            _context(PRIVACY_NOTE),
        ],
    )


def build_error_view(reason: str, root: RootMessage) -> Dict[str, Any]:
    return _modal(
        "sentiment_score_error",
        [
            _section("⚠️ *Unable to calculate sentiment right now.*"),
            _section(f"Reason: `{reason}`"),
            _context(f"Original message: {trim_text(root.text, 120)}"),
        ],
    )
