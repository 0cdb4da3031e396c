# thread_sentiment/dependencies.py
from functools import lru_cache

from thread_sentiment.config import get_settings
from thread_sentiment.services.analysis_service import ThreadSentimentAnalyzer
from thread_sentiment.services.slack_service import SlackClient


@lru_cache()
def get_slack_client() -> SlackClient:
    settings = get_settings()
    return SlackClient(settings.slack_bot_token, thread_limit=settings.slack_thread_limit)


@lru_cache()
def get_thread_analyzer() -> ThreadSentimentAnalyzer:
    return ThreadSentimentAnalyzer.from_settings(get_settings())
