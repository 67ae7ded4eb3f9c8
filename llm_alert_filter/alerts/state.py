"""Encode pending alert state into the modal's ``private_metadata`` slot.

Slack gives each modal a single opaque string and keeps no session for us, so
everything needed to close the loop on an alert travels inside that string:
compact JSON, gzip-compressed, then standard base64 with padding.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import zlib

from pydantic import BaseModel, ConfigDict, ValidationError

from llm_alert_filter.errors import DecodeError


class PendingAlertState(BaseModel):
    """Context of a posted alert awaiting operator feedback."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    message_timestamp: str
    log_group: str
    message: str


def encode_state(state: PendingAlertState) -> str:
    payload = state.model_dump_json().encode("utf-8")
    # mtime is pinned so equal states always yield equal tokens.
    compressed = gzip.compress(payload, mtime=0)
    return base64.b64encode(compressed).decode("ascii")


def decode_state(token: str) -> PendingAlertState:
    try:
        compressed = base64.b64decode(token.encode("ascii"), validate=True)
    except (UnicodeEncodeError, binascii.Error) as exc:
        raise DecodeError("State token is not valid base64") from exc

    try:
        payload = gzip.decompress(compressed)
    except (OSError, EOFError, zlib.error) as exc:
        raise DecodeError("State token is not valid gzip data") from exc

    try:
        return PendingAlertState.model_validate_json(payload)
    except ValidationError as exc:
        raise DecodeError("State token does not describe a pending alert") from exc
