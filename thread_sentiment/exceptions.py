# thread_sentiment/exceptions.py
from typing import Optional


class OracleUnavailable(Exception):
    """The generative model could not be reached or refused the request."""

    def __init__(self, model: str, reason: str):
        super().__init__(f'Gemini model "{model}" failed: {reason}')
        self.model = model
        self.reason = reason


class OracleMalformedResponse(Exception):
    """The generative model answered with something that is not a number."""

    def __init__(self, raw: str):
        super().__init__(f'Gemini returned non-numeric value "{raw}"')
        self.raw = raw


class NoAnalyzableContent(Exception):
    pass


class InvalidShortcutPayload(ValueError):
    pass


class SlackApiError(Exception):
    def __init__(self, method: str, error: Optional[str]):
        super().__init__(f"Slack API {method} failed: {error or 'unknown_error'}")
        self.method = method
        self.error = error
