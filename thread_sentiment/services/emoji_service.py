# thread_sentiment/services/emoji_service.py
"""
Emoji sentiment.

Reaction names coming from Slack (``thumbsup``, ``+1``, ``heart::skin-tone-2``)
and emoji written inside message text are resolved to emoji characters and
weighted with the Emoji Sentiment Ranking v1.0 dataset (Kralj Novak et al.,
2015) bundled in ``thread_sentiment/data/Emoji_Sentiment_Data_v1.0.csv``.
"""
import csv
import logging
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import emoji

from thread_sentiment.schemas.message import SlackReaction
from thread_sentiment.schemas.sentiment import ReactionSummary

logger = logging.getLogger(__name__)

DATASET_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "Emoji_Sentiment_Data_v1.0.csv"
)

VARIATION_SELECTOR = "\ufe0f"
MAX_SUMMARIZED_REACTIONS = 8
SUMMARY_SEPARATOR = " • "
NO_REACTIONS_TEXT = "No reactions yet."
# In-text emoji are put on the AFINN word scale (-5..5)
TEXT_EMOJI_SCALE = 5

# Slack shorthand that the standard alias directory may not know about
REACTION_ALIAS: Dict[str, str] = {
    "thumbsup": "👍",
    "thumbsdown": "👎",
    "+1": "👍",
    "-1": "👎",
}


@dataclass(frozen=True)
class EmojiEntry:
    char: str
    occurrences: int
    negative: int
    neutral: int
    positive: int

    @property
    def total(self) -> int:
        return self.negative + self.neutral + self.positive

    def numeric_score(self) -> float:
        """(pos - neg) / total, in [-1, 1]."""
        t = self.total or 1
        return (self.positive - self.negative) / t


def decode_codepoints(codepoints: str) -> str:
    """'0x1f44d' -> '👍', '0023-20E3' -> '#⃣' (hyphen-delimited hex)."""
    return "".join(chr(int(part, 16)) for part in codepoints.strip().split("-") if part)


def _to_int(value: Optional[str]) -> int:
    try:
        return int(value or 0)
    except ValueError:
        return 0


def _row_char(row: Mapping[str, str]) -> Optional[str]:
    char = (row.get("Emoji") or "").strip()
    if char:
        return char
    codepoint = row.get("Unicode codepoint")
    if not codepoint:
        return None
    try:
        return decode_codepoints(codepoint)
    except ValueError:
        logger.warning("Skipping emoji dataset row with bad codepoint %r", codepoint)
        return None


class EmojiSentimentTable:
    """Read-only emoji character -> weight mapping."""

    def __init__(self, weights: Mapping[str, float]):
        self._weights = MappingProxyType(dict(weights))

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, str]]) -> "EmojiSentimentTable":
        """Rows use the dataset's column names (``Emoji``, ``Unicode codepoint``, ``Negative``...)."""
        weights: Dict[str, float] = {}
        for row in rows:
            char = _row_char(row)
            if not char:
                continue
            entry = EmojiEntry(
                char=char,
                occurrences=_to_int(row.get("Occurrences")),
                negative=_to_int(row.get("Negative")),
                neutral=_to_int(row.get("Neutral")),
                positive=_to_int(row.get("Positive")),
            )
            weights[char] = entry.numeric_score()
        return cls(weights)

    @classmethod
    def from_csv(cls, csv_path: str = DATASET_PATH) -> "EmojiSentimentTable":
        with open(csv_path, newline="", encoding="utf-8") as f:
            table = cls.from_rows(csv.DictReader(f))
        logger.debug("Loaded %d emoji sentiment weights from %s", len(table), csv_path)
        return table

    def weight_of(self, char: Optional[str]) -> Optional[float]:
        if not char:
            return None
        weight = self._weights.get(char)
        if weight is None and VARIATION_SELECTOR in char:
            weight = self._weights.get(char.replace(VARIATION_SELECTOR, ""))
        return weight

    def __len__(self) -> int:
        return len(self._weights)

    def __contains__(self, char: object) -> bool:
        return char in self._weights


_emoji_table: Optional[EmojiSentimentTable] = None


def get_emoji_table() -> EmojiSentimentTable:
    global _emoji_table
    if _emoji_table is None:
        _emoji_table = EmojiSentimentTable.from_csv()
    return _emoji_table


def resolve_reaction_emoji(name: Optional[str]) -> Optional[str]:
    """Map a Slack reaction name to its emoji character, or None."""
    if not name:
        return None
    base_name = name.lower().split("::")[0]
    if not base_name:
        return None
    code = f":{base_name}:"
    resolved = emoji.emojize(code, language="alias")
    if resolved != code:
        return resolved
    return REACTION_ALIAS.get(base_name)


def reaction_sentiment_delta(name: Optional[str], count: int = 0, table: Optional[EmojiSentimentTable] = None) -> float:
    emoji_char = resolve_reaction_emoji(name)
    if not emoji_char:
        return 0.0
    if table is None:
        table = get_emoji_table()
    weight = table.weight_of(emoji_char)
    if weight is None:
        return 0.0
    return weight * count


def find_text_emoji(text: Optional[str]) -> List[str]:
    """Emoji in message text, including Slack ``:shortcode:`` spellings, in order."""
    if not text:
        return []
    return [match["emoji"] for match in emoji.emoji_list(emoji.emojize(text, language="alias"))]


def text_emoji_score(text: Optional[str], table: Optional[EmojiSentimentTable] = None) -> int:
    """Sum of the dataset weights of emoji found in the text, scaled to AFINN points."""
    found = find_text_emoji(text)
    if not found:
        return 0
    if table is None:
        table = get_emoji_table()
    score = 0
    for char in found:
        weight = table.weight_of(char)
        if weight is not None:
            score += int(round(weight * TEXT_EMOJI_SCALE))
    return score


def summarize_reactions(
    reactions: Optional[Sequence[SlackReaction]],
    table: Optional[EmojiSentimentTable] = None,
) -> ReactionSummary:
    """
    Reduce the first MAX_SUMMARIZED_REACTIONS reactions (in Slack's order) to a
    score and a ':name: ×count' display line. Later reactions are ignored.
    """
    if not reactions:
        return ReactionSummary(reaction_score=0.0, summary_text=NO_REACTIONS_TEXT)

    if table is None:
        table = get_emoji_table()
    reaction_score = 0.0
    parts = []
    for reaction in list(reactions)[:MAX_SUMMARIZED_REACTIONS]:
        name = reaction.name or "reaction"
        count = reaction.count or 0
        reaction_score += reaction_sentiment_delta(name, count, table)
        parts.append(f":{name}: ×{count}")

    return ReactionSummary(reaction_score=reaction_score, summary_text=SUMMARY_SEPARATOR.join(parts))
