# thread_sentiment/services/signature_service.py
import hashlib
import hmac
import time
from typing import Optional


class SignatureError(ValueError):
    pass


def compute_signature(signing_secret: str, timestamp: str, body: bytes) -> str:
    base = b"v0:" + timestamp.encode("utf-8") + b":" + body
    digest = hmac.new(signing_secret.encode("utf-8"), base, hashlib.sha256).hexdigest()
    return f"v0={digest}"


def verify_slack_signature(
    signing_secret: str,
    signature: Optional[str],
    timestamp: Optional[str],
    body: bytes,
    max_age: int = 60 * 5,
    now: Optional[float] = None,
) -> None:
    """Raise SignatureError unless the request was signed with signing_secret."""
    if not signature or not timestamp:
        raise SignatureError("Missing Slack signature headers.")

    try:
        ts = float(timestamp)
    except ValueError:
        raise SignatureError("Stale Slack request.")
    current = time.time() if now is None else now
    if abs(current - ts) > max_age:
        raise SignatureError("Stale Slack request.")

    expected = compute_signature(signing_secret, timestamp, body)
    if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
        raise SignatureError("Invalid Slack signature.")
