# thread_sentiment/services/llm_service.py
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from google import genai

from thread_sentiment.config import Settings
from thread_sentiment.exceptions import OracleMalformedResponse, OracleUnavailable

logger = logging.getLogger(__name__)

MIN_SCORE = -3.0
MAX_SCORE = 3.0
CONTEXT_LIMIT = 500

# ----- Prompt Template -----
BASE_TEMPLATE = """Analyze the sentiment of this message and return ONLY a number from -3 to +3:
- +3 = Very positive
- +2 = Positive
- +1 = Slightly positive
- 0 = Neutral
- -1 = Slightly negative
- -2 = Negative
- -3 = Very negative

{context_block}Message: "{text}"

Return ONLY the number, nothing else."""

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class GeminiOracle:
    """Thin wrapper over the google-genai client exposing generate(prompt, model)."""

    def __init__(self, api_key: str):
        self.client = genai.Client(api_key=api_key)

    def generate(self, prompt: str, model: str) -> str:
        response = self.client.models.generate_content(model=model, contents=prompt)
        # Safely extract text
        return getattr(response, "text", "") or ""


def build_oracle(settings: Settings) -> Optional[GeminiOracle]:
    """Return a Gemini oracle, or None when no API key is configured."""
    if not settings.oracle_enabled:
        logger.info("GEMINI_API_KEY not set; scoring with the lexicon only.")
        return None
    try:
        return GeminiOracle(settings.gemini_api_key)
    except Exception as e:
        logger.warning("Gemini initialization failed: %s", e)
        return None


def build_prompt(text: str, context: str = "") -> str:
    context = (context or "")[:CONTEXT_LIMIT]
    context_block = f"Context:\n{context}\n\n" if context else ""
    return BASE_TEMPLATE.format(context_block=context_block, text=text)


def parse_oracle_score(raw: str) -> float:
    """
    Read the leading number of a model reply ("2", "-1.5", "+3 (positive)").
    Raises OracleMalformedResponse when the reply does not start with one.
    """
    cleaned = (raw or "").strip()
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        raise OracleMalformedResponse(cleaned)
    return float(match.group(0))


def clamp_score(score: float) -> float:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def score_via_oracle(oracle, text: str, context: str, model: str) -> float:
    """
    Ask one model for a score in [-3, 3].

    Transport or API errors raise OracleUnavailable so the caller can move on to
    the next model. A non-numeric answer is not an error: it scores 0.
    """
    prompt = build_prompt(text, context)
    try:
        reply = oracle.generate(prompt, model)
    except Exception as e:
        logger.warning('Gemini model "%s" failed: %s', model, e)
        raise OracleUnavailable(model, str(e)) from e

    try:
        score = parse_oracle_score(reply)
    except OracleMalformedResponse as e:
        logger.warning("%s", e)
        return 0.0
    return clamp_score(score)


def candidate_models(default_model: Optional[str], fallbacks: Iterable[str]) -> List[str]:
    """Configured model first, then fallbacks; duplicates and blanks dropped."""
    models: List[str] = []
    for model in [default_model, *fallbacks]:
        if model and model not in models:
            models.append(model)
    return models


class OracleStatus(str, Enum):
    SCORED = "scored"
    INCONCLUSIVE = "inconclusive"
    FAILED = "failed"


@dataclass(frozen=True)
class OracleAttempt:
    model: str
    status: OracleStatus
    score: float = 0.0
    error: Optional[str] = None


def run_oracle_cascade(oracle, text: str, context: str, models: Iterable[str]) -> List[OracleAttempt]:
    """
    Try each model in order until one returns a non-zero score.
    Returns every attempt made; the last one is SCORED if the cascade succeeded.
    """
    attempts: List[OracleAttempt] = []
    for model in models:
        try:
            score = score_via_oracle(oracle, text, context, model)
        except OracleUnavailable as e:
            attempts.append(OracleAttempt(model=model, status=OracleStatus.FAILED, error=e.reason))
            continue
        if score != 0:
            attempts.append(OracleAttempt(model=model, status=OracleStatus.SCORED, score=score))
            break
        attempts.append(OracleAttempt(model=model, status=OracleStatus.INCONCLUSIVE))
    return attempts
