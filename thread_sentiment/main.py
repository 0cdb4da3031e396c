# thread_sentiment/main.py
import logging
from contextlib import asynccontextmanager

import anyio
import uvicorn
from fastapi import FastAPI

from thread_sentiment.config import get_settings, setup_logging
from thread_sentiment.routers import slack
from thread_sentiment.services.emoji_service import get_emoji_table

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)
    if not settings.slack_bot_token:
        logger.warning("SLACK_BOT_TOKEN is not set. Slack API calls will fail.")

    # build the emoji table once, before the first request
    table = await anyio.to_thread.run_sync(get_emoji_table)
    logger.info("Emoji sentiment table ready (%d emoji)", len(table))
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Slack Thread Sentiment", lifespan=lifespan)
    app.include_router(slack.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "message": "Sentiment service running."}

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Sentiment service running on http://localhost:%d", settings.port)
    uvicorn.run("thread_sentiment.main:app", host="0.0.0.0", port=settings.port)
