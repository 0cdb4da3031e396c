# thread_sentiment/services/shortcut_service.py
import asyncio
import logging
from typing import Any, Dict, Optional

import anyio

from thread_sentiment.exceptions import InvalidShortcutPayload, NoAnalyzableContent
from thread_sentiment.schemas.message import RootMessage
from thread_sentiment.services.analysis_service import ThreadSentimentAnalyzer
from thread_sentiment.services.modal_service import build_error_view, build_loading_view, build_result_view
from thread_sentiment.services.slack_service import SlackClient

logger = logging.getLogger(__name__)

NO_MESSAGES_REASON = "Unable to read conversation messages (is the bot in the channel?)"


def _root_message(payload: Dict[str, Any]) -> RootMessage:
    message = payload.get("message") or {}
    channel = payload.get("channel") or {}
    return RootMessage(
        text=message.get("text") or "No text content",
        user_id=message.get("user"),
        channel_id=channel.get("id") or message.get("channel"),
    )


async def _show(slack: SlackClient, trigger_id: str, view_id: Optional[str], view_hash: Optional[str], view: Dict[str, Any]):
    if view_id:
        await anyio.to_thread.run_sync(lambda: slack.update_view(view_id, view, view_hash))
    else:
        await anyio.to_thread.run_sync(lambda: slack.open_view(trigger_id, view))


async def handle_sentiment_shortcut(
    payload: Optional[Dict[str, Any]],
    slack: SlackClient,
    analyzer: ThreadSentimentAnalyzer,
) -> None:
    """
    1) open a loading modal, 2) fetch thread + root reactions concurrently,
    3) analyze, 4) swap the modal for the result (or an error view).
    """
    if not payload:
        raise InvalidShortcutPayload("Missing Slack payload.")

    message = payload.get("message") or {}
    trigger_id = payload.get("trigger_id")
    root = _root_message(payload)
    channel_id = root.channel_id
    root_ts = message.get("thread_ts") or message.get("ts")

    if not trigger_id or not channel_id or not root_ts:
        raise InvalidShortcutPayload("Slack payload missing trigger_id, channel, or message timestamp.")

    opened = await anyio.to_thread.run_sync(lambda: slack.open_view(trigger_id, build_loading_view(root)))
    view = (opened or {}).get("view") or {}
    view_id = view.get("id")
    view_hash = view.get("hash")

    try:
        thread_messages, reactions = await asyncio.gather(
            anyio.to_thread.run_sync(slack.fetch_thread_messages, channel_id, root_ts),
            anyio.to_thread.run_sync(slack.fetch_root_reactions, channel_id, root_ts),
        )

        if not thread_messages:
            raise NoAnalyzableContent(NO_MESSAGES_REASON)

        report = await anyio.to_thread.run_sync(analyzer.analyze, thread_messages, reactions)
        logger.info(
            "Thread %s in %s: %d messages, combined score %.2f (%s)",
            root_ts,
            channel_id,
            report.analyzed_message_count,
            report.combined_score,
            report.mood.label,
        )
        await _show(slack, trigger_id, view_id, view_hash, build_result_view(root, report))
    except Exception as e:
        logger.exception("Sentiment analysis failed: %s", e)
        await _show(slack, trigger_id, view_id, view_hash, build_error_view(str(e), root))


async def run_sentiment_shortcut(payload: Dict[str, Any], slack: SlackClient, analyzer: ThreadSentimentAnalyzer) -> None:
    """Background-task entry point: errors are logged, never raised."""
    try:
        await handle_sentiment_shortcut(payload, slack, analyzer)
    except Exception as e:
        logger.error("Failed to process sentiment shortcut: %s", e, exc_info=True)
