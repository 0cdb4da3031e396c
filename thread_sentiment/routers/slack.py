# thread_sentiment/routers/slack.py
import json
import logging
from urllib.parse import parse_qs

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response

from thread_sentiment.config import Settings, get_settings
from thread_sentiment.dependencies import get_slack_client, get_thread_analyzer
from thread_sentiment.services.analysis_service import ThreadSentimentAnalyzer
from thread_sentiment.services.shortcut_service import run_sentiment_shortcut
from thread_sentiment.services.signature_service import SignatureError, verify_slack_signature
from thread_sentiment.services.slack_service import SlackClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/slack", tags=["Slack"])


async def verified_body(request: Request, settings: Settings = Depends(get_settings)) -> bytes:
    """Raw request body, checked against the signing secret when one is configured."""
    body = await request.body()
    if not settings.slack_signing_secret:
        return body
    try:
        verify_slack_signature(
            settings.slack_signing_secret,
            request.headers.get("x-slack-signature"),
            request.headers.get("x-slack-request-timestamp"),
            body,
            max_age=settings.slack_signature_max_age,
        )
    except SignatureError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return body


@router.post("/sentiment")
async def sentiment_shortcut(
    background_tasks: BackgroundTasks,
    body: bytes = Depends(verified_body),
    slack: SlackClient = Depends(get_slack_client),
    analyzer: ThreadSentimentAnalyzer = Depends(get_thread_analyzer),
):
    """
    Message shortcut endpoint. Slack needs an answer within 3 seconds, so the
    request is acknowledged right away and the analysis runs in the background.
    """
    form = parse_qs(body.decode("utf-8"))
    raw_payload = (form.get("payload") or [None])[0]
    if not raw_payload:
        raise HTTPException(status_code=400, detail="Missing Slack payload.")

    try:
        payload = json.loads(raw_payload)
    except ValueError as e:
        logger.error("Invalid Slack shortcut payload: %s", e)
        raise HTTPException(status_code=400, detail="Invalid Slack payload.")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid Slack payload.")

    background_tasks.add_task(run_sentiment_shortcut, payload, slack, analyzer)
    return Response(status_code=200)
