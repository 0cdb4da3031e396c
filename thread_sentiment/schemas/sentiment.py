# thread_sentiment/schemas/sentiment.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Mood(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    emoji: str


class MessageAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    ts: str
    text: str
    snippet: str
    score: float
    user_id: Optional[str] = None
    is_root: bool = False
    used_oracle: bool = False
    oracle_model: Optional[str] = None


class ReactionSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    reaction_score: float = 0.0
    summary_text: str = "No reactions yet."


class ThreadSentimentReport(BaseModel):
    """
    Result of one on-demand thread analysis.
    combined_score is always text_score + reaction_score.
    """

    model_config = ConfigDict(frozen=True)

    text_score: float
    reaction_score: float
    combined_score: float
    mood: Mood
    reaction_summary_text: str
    message_analyses: List[MessageAnalysis]
    analyzed_message_count: int
