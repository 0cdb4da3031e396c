# thread_sentiment/schemas/message.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SlackMessage(BaseModel):
    """One message of a thread as returned by conversations.replies."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    ts: str
    text: Optional[str] = None
    user: Optional[str] = None
    thread_ts: Optional[str] = None

    @property
    def is_thread_root(self) -> bool:
        return bool(self.thread_ts) and self.ts == self.thread_ts


class SlackReaction(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = "reaction"
    count: int = Field(default=0, ge=0)


class RootMessage(BaseModel):
    """The message a shortcut was invoked on, as shown in the modal."""

    text: str = "No text content"
    user_id: Optional[str] = None
    channel_id: Optional[str] = None
