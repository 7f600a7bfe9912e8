"""
Slack request signature verification.

Slack signs every HTTP request with HMAC-SHA256 over
``v0:<timestamp>:<raw body>``, keyed by the app's signing secret, and sends
the result as ``X-Slack-Signature: v0=<hex digest>``.
"""

import hashlib
import hmac
import logging
import time
from typing import Optional, Union

from slack_bolt.response import BoltResponse

logger = logging.getLogger(__name__)

SIGNATURE_VERSION = "v0"
DEFAULT_TOLERANCE = 60 * 5

SIGNATURE_HEADER = "x-slack-signature"
TIMESTAMP_HEADER = "x-slack-request-timestamp"


def validate(
    signature_header: Optional[str],
    timestamp_header: Optional[str],
    raw_body: Union[str, bytes],
    secret: Optional[str],
) -> bool:
    """
    Check that a request was signed with the given secret.

    Args:
        signature_header: Value of X-Slack-Signature, e.g. "v0=abc123..."
        timestamp_header: Value of X-Slack-Request-Timestamp
        raw_body: Request body exactly as received
        secret: Slack signing secret

    Returns:
        True if the signature matches, False otherwise (including malformed input)
    """
    if not signature_header or not timestamp_header or not secret:
        return False

    version, sep, digest = signature_header.partition("=")
    if not sep or version != SIGNATURE_VERSION or not digest:
        return False

    if isinstance(raw_body, str):
        raw_body = raw_body.encode("utf-8")

    # Signed as bytes so bodies that are not valid UTF-8 still verify
    basestring = f"{version}:{timestamp_header}:".encode("utf-8") + (raw_body or b"")
    expected = hmac.new(secret.encode("utf-8"), basestring, hashlib.sha256).hexdigest()

    return hmac.compare_digest(expected, digest)


def is_recent(
    timestamp_header: Optional[str],
    now: Optional[float] = None,
    tolerance: int = DEFAULT_TOLERANCE,
) -> bool:
    """Reject requests whose timestamp is too far from now (replay protection)."""
    try:
        timestamp = float(timestamp_header)
    except (TypeError, ValueError):
        return False
    if now is None:
        now = time.time()
    return abs(now - timestamp) <= tolerance


def _first_header(headers, name: str) -> Optional[str]:
    values = headers.get(name) or []
    if isinstance(values, str):
        return values
    return values[0] if values else None


def verify_request_middleware(signing_secret: str):
    """
    Build a Bolt global middleware that rejects unsigned or stale requests.

    Runs before any listener, so nothing is acknowledged or changed for an
    unauthenticated request. Socket Mode requests carry no signature and pass
    through.
    """

    def verify_request(req, resp, next):
        if req.mode == "socket_mode":
            return next()

        signature = _first_header(req.headers, SIGNATURE_HEADER)
        timestamp = _first_header(req.headers, TIMESTAMP_HEADER)

        if not is_recent(timestamp) or not validate(
            signature, timestamp, req.raw_body, signing_secret
        ):
            logger.warning("Rejected Slack request with invalid signature")
            return BoltResponse(status=401, body="Unauthorized")

        return next()

    return verify_request
