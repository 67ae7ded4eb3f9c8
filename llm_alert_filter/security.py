"""Utilities for validating Slack request signatures."""

from __future__ import annotations

import hmac
import time
from hashlib import sha256
from typing import Mapping

from .errors import AuthError


SLACK_SIGNATURE_HEADER = "X-Slack-Signature"
SLACK_TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"
VERSION = "v0"
DEFAULT_TOLERANCE = 60 * 5  # five minutes


def compute_signature(signing_secret: str, timestamp: str, body: bytes | str) -> str:
    """Return Slack-compatible signature for the provided payload."""

    if isinstance(body, str):
        body = body.encode("utf-8")
    basestring = f"{VERSION}:{timestamp}:".encode("utf-8") + body
    secret = signing_secret.encode("utf-8")
    digest = hmac.new(secret, basestring, sha256).hexdigest()
    return f"{VERSION}={digest}"


def is_valid_slack_request(
    *,
    signing_secret: str,
    timestamp: str | None,
    body: bytes,
    signature: str | None,
    tolerance: int = DEFAULT_TOLERANCE,
) -> bool:
    """Validate Slack signature and timestamp to guard against replay attacks."""

    if not timestamp or not signature:
        return False
    # int() alone would also accept " 123", "+123" and "1_000".
    if not (timestamp.isascii() and timestamp.isdigit()):
        return False

    try:
        request_ts = int(timestamp)
        body.decode("utf-8")
    except (TypeError, ValueError):
        return False

    # Only stale requests are rejected; clock skew into the future is tolerated.
    if int(time.time()) - request_ts > tolerance:
        return False

    expected = compute_signature(signing_secret, timestamp, body)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def verify_slack_request(*, signing_secret: str, headers: Mapping[str, str], body: bytes) -> None:
    """Raise :class:`AuthError` unless the request carries a fresh, valid signature."""

    if not is_valid_slack_request(
        signing_secret=signing_secret,
        timestamp=headers.get(SLACK_TIMESTAMP_HEADER),
        body=body,
        signature=headers.get(SLACK_SIGNATURE_HEADER),
    ):
        raise AuthError("invalid_signature")
