# thread_sentiment/services/analysis_service.py
import logging
import re
from functools import lru_cache
from typing import Callable, List, Optional, Sequence

import emoji
from afinn import Afinn

from thread_sentiment.config import Settings
from thread_sentiment.schemas.message import SlackMessage, SlackReaction
from thread_sentiment.schemas.sentiment import MessageAnalysis, Mood, ThreadSentimentReport
from thread_sentiment.services.emoji_service import (
    EmojiSentimentTable,
    get_emoji_table,
    summarize_reactions,
    text_emoji_score,
)
from thread_sentiment.services.llm_service import (
    CONTEXT_LIMIT,
    OracleStatus,
    build_oracle,
    candidate_models,
    run_oracle_cascade,
)

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 120
POSITIVE_THRESHOLD = 3
NEGATIVE_THRESHOLD = -3

POSITIVE = Mood(label="Positive", emoji="😄")
NEGATIVE = Mood(label="Negative", emoji="😟")
NEUTRAL = Mood(label="Neutral", emoji="😐")


_afinn = None
def get_lexicon():
    global _afinn
    if _afinn is None:
        _afinn = Afinn(language="en")
    return _afinn


# A negator flips the score of the word right after it ("don't like" -> -2)
NEGATORS = frozenset(
    {
        "not", "no", "never", "cannot", "cant", "can't", "dont", "don't", "doesnt", "doesn't",
        "didnt", "didn't", "isnt", "isn't", "arent", "aren't", "wasnt", "wasn't", "werent", "weren't",
        "wont", "won't", "wouldnt", "wouldn't", "shouldnt", "shouldn't", "couldnt", "couldn't",
        "aint", "ain't", "hardly",
    }
)
MAX_PHRASE_WORDS = 3
_WORD = re.compile(r"[\w']+(?:-[\w']+)*", re.UNICODE)


@lru_cache(maxsize=4096)
def _entry_score(phrase: str) -> Optional[int]:
    """AFINN score when the phrase is exactly one lexicon entry, else None."""
    lexicon = get_lexicon()
    if lexicon.find_all(phrase) != [phrase]:
        return None
    return int(lexicon.score(phrase))


def tokenize(text: str) -> List[str]:
    text = emoji.replace_emoji(emoji.emojize(text, language="alias"), replace=" ")
    return _WORD.findall(text.lower().replace("\u2019", "'"))


def word_score(words: Sequence[str]) -> int:
    """
    Sum AFINN entries over the words, longest multi-word entry first. A single
    word preceded by a negator counts with the opposite sign; multi-word entries
    ("not good", "does not work") already carry their negation.
    """
    score = 0
    i = 0
    while i < len(words):
        for size in range(min(MAX_PHRASE_WORDS, len(words) - i), 1, -1):
            phrase_score = _entry_score(" ".join(words[i : i + size]))
            if phrase_score is not None:
                score += phrase_score
                i += size
                break
        else:
            value = _entry_score(words[i]) or 0
            if value and i > 0 and words[i - 1] in NEGATORS:
                value = -value
            score += value
            i += 1
    return score


def lexical_score(text: str, table: Optional[EmojiSentimentTable] = None) -> int:
    """AFINN word score with negation, plus the weights of emoji written in the text."""
    text = text or ""
    return word_score(tokenize(text)) + text_emoji_score(text, table)


def trim_text(text: Optional[str], max_length: int = SNIPPET_LENGTH) -> str:
    normalized = (text or "").strip()
    if len(normalized) <= max_length:
        return normalized
    return f"{normalized[: max_length - 3]}..."


def classify_mood(score: float) -> Mood:
    if score >= POSITIVE_THRESHOLD:
        return POSITIVE
    if score <= NEGATIVE_THRESHOLD:
        return NEGATIVE
    return NEUTRAL


def build_thread_context(messages: Sequence[SlackMessage], limit: int = CONTEXT_LIMIT) -> str:
    texts = [m.text.strip() for m in messages if m.text and m.text.strip()]
    return " ".join(texts)[:limit]


class ThreadSentimentAnalyzer:
    """
    Scores a thread: lexicon per message, Gemini cascade when the lexicon
    returns exactly 0, plus the emoji reactions on the root message.

    A lexicon score of 0 means both "neutral" and "no sentiment words found";
    either way the message is handed to the oracle cascade.
    """

    def __init__(
        self,
        oracle=None,
        models: Optional[Sequence[str]] = None,
        lexical_scorer: Callable[[str], int] = lexical_score,
        emoji_table: Optional[EmojiSentimentTable] = None,
    ):
        self.oracle = oracle
        self.models = list(models or [])
        self.lexical_scorer = lexical_scorer
        self.emoji_table = emoji_table

    @classmethod
    def from_settings(cls, settings: Settings) -> "ThreadSentimentAnalyzer":
        return cls(
            oracle=build_oracle(settings),
            models=candidate_models(settings.gemini_model, settings.gemini_fallback_models),
        )

    def analyze_message(self, message: SlackMessage, context: str) -> Optional[MessageAnalysis]:
        text = (message.text or "").strip()
        if not text:
            return None

        score = self.lexical_scorer(text)
        used_oracle = False
        oracle_model = None

        if score == 0 and self.oracle is not None:
            attempts = run_oracle_cascade(self.oracle, text, context, self.models)
            if attempts and attempts[-1].status == OracleStatus.SCORED:
                score = attempts[-1].score
                used_oracle = True
                oracle_model = attempts[-1].model
            logger.debug(
                "Oracle cascade for %s: %s",
                message.ts,
                ", ".join(f"{a.model}={a.status.value}" for a in attempts) or "no models",
            )

        return MessageAnalysis(
            ts=message.ts,
            text=text,
            snippet=trim_text(text, SNIPPET_LENGTH),
            score=score,
            user_id=message.user,
            is_root=message.is_thread_root,
            used_oracle=used_oracle,
            oracle_model=oracle_model,
        )

    def analyze(
        self,
        messages: Sequence[SlackMessage],
        reactions: Optional[Sequence[SlackReaction]] = None,
    ) -> ThreadSentimentReport:
        # Every message sees the same context, including replies scored after it
        context = build_thread_context(messages)

        message_analyses: List[MessageAnalysis] = []
        text_score = 0.0
        for message in messages:
            analysis = self.analyze_message(message, context)
            if analysis is None:
                continue
            text_score += analysis.score
            message_analyses.append(analysis)

        table = self.emoji_table if self.emoji_table is not None else get_emoji_table()
        summary = summarize_reactions(reactions, table)
        combined_score = text_score + summary.reaction_score

        return ThreadSentimentReport(
            text_score=text_score,
            reaction_score=summary.reaction_score,
            combined_score=combined_score,
            mood=classify_mood(combined_score),
            reaction_summary_text=summary.summary_text,
            message_analyses=message_analyses,
            analyzed_message_count=len(message_analyses),
        )
