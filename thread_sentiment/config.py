# thread_sentiment/config.py
import logging
import os
import sys
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables from .env (or DOTENV_PATH when set)
load_dotenv(os.getenv("DOTENV_PATH") or os.path.join(os.getcwd(), ".env"))

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_FALLBACK_MODELS = ["gemini-2.5-flash", "gemini-1.5-flash", "gemini-1.5-pro", "gemini-pro"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _to_int(value: Optional[str], fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _to_list(value: Optional[str], fallback: List[str]) -> List[str]:
    if not value:
        return list(fallback)
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    port: int = 3000
    slack_bot_token: str = ""
    slack_signing_secret: str = ""
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_fallback_models: List[str] = DEFAULT_FALLBACK_MODELS
    slack_thread_limit: int = 50
    slack_signature_max_age: int = 60 * 5
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            port=_to_int(os.getenv("PORT"), 3000),
            slack_bot_token=os.getenv("SLACK_BOT_TOKEN", ""),
            slack_signing_secret=os.getenv("SLACK_SIGNING_SECRET", ""),
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
            gemini_fallback_models=_to_list(os.getenv("GEMINI_FALLBACK_MODELS"), DEFAULT_FALLBACK_MODELS),
            slack_thread_limit=_to_int(os.getenv("SLACK_THREAD_LIMIT"), 50),
            slack_signature_max_age=_to_int(os.getenv("SLACK_SIGNATURE_MAX_AGE"), 60 * 5),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def oracle_enabled(self) -> bool:
        return bool(self.gemini_api_key)


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stdout handler to the package logger."""
    logger = logging.getLogger("thread_sentiment")
    logger.setLevel(level)
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)
    return logger
